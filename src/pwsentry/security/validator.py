"""
Password validation combining length, strength, breach and history checks.

All applicable failures are collected; validation does not stop at the
first one. Error order is fixed: length, strength (and suggestions),
breach, reuse.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from pwsentry.hibp.checker import BreachChecker
from pwsentry.hibp.models import BreachCheckResult, format_breach_count
from pwsentry.security.history import HistoryEnforcer, ReuseCheckResult
from pwsentry.security.strength import StrengthEstimate, StrengthScorer
from pwsentry.storage.base import CheckReason

logger = logging.getLogger(__name__)


@dataclass
class PasswordStrength:
    """Strength details, populated whether or not the password is valid."""

    score: int
    warning: str = ""
    suggestions: list[str] = field(default_factory=list)
    crack_time: str = ""
    is_breached: bool = False
    breach_count: int = 0
    is_reused: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "feedback": {
                "warning": self.warning,
                "suggestions": self.suggestions,
            },
            "crack_time": self.crack_time,
            "is_breached": self.is_breached,
            "breach_count": self.breach_count,
            "is_reused": self.is_reused,
        }


@dataclass
class ValidationResult:
    """Outcome of validating a candidate password."""

    errors: list[str]
    strength: PasswordStrength
    # Sub-checks that could not run and were assumed to pass
    degraded_checks: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "strength": self.strength.to_dict(),
            "degraded_checks": self.degraded_checks,
        }


class PasswordValidator:
    """Validates new passwords for existing and new accounts."""

    MIN_LENGTH = 8
    MAX_LENGTH = 100
    MIN_STRENGTH_SCORE = 2  # Require at least "fair"

    def __init__(
        self,
        breach_checker: BreachChecker,
        scorer: StrengthScorer | None = None,
        history: HistoryEnforcer | None = None,
        min_length: int | None = None,
        max_length: int | None = None,
        min_strength_score: int | None = None,
    ):
        """Initialize validator.

        Args:
            breach_checker: Breach checker (caches when given an account ID)
            scorer: Strength scorer (default: zxcvbn)
            history: History enforcer; without one reuse is never checked
            min_length: Minimum length in characters (default: 8)
            max_length: Maximum length in characters (default: 100)
            min_strength_score: Minimum zxcvbn score (default: 2)
        """
        self.breach_checker = breach_checker
        self.scorer = scorer or StrengthScorer()
        self.history = history
        self.min_length = self.MIN_LENGTH if min_length is None else min_length
        self.max_length = self.MAX_LENGTH if max_length is None else max_length
        self.min_strength_score = (
            self.MIN_STRENGTH_SCORE if min_strength_score is None else min_strength_score
        )

    async def validate_for_existing_account(
        self,
        password: str,
        account_id: str,
        user_inputs: Sequence[str] | None = None,
    ) -> ValidationResult:
        """Validate a password change: length, strength, breach and reuse.

        Args:
            password: Plain text candidate password
            account_id: Account ID (enables breach caching and history)
            user_inputs: Optional user-specific strings (email, name, etc.)
        """
        return await self._validate(
            password,
            account_id=account_id,
            user_inputs=user_inputs,
            check_history=True,
        )

    async def validate_for_new_account(
        self,
        password: str,
        user_inputs: Sequence[str] | None = None,
    ) -> ValidationResult:
        """Validate a password for registration.

        No account ID, so breach results are not cached and history is
        never consulted.
        """
        return await self._validate(
            password,
            account_id=None,
            user_inputs=user_inputs,
            check_history=False,
        )

    async def _validate(
        self,
        password: str,
        account_id: str | None,
        user_inputs: Sequence[str] | None,
        check_history: bool,
    ) -> ValidationResult:
        reason = CheckReason.PASSWORD_CHANGE if account_id else CheckReason.REGISTRATION

        # Independent checks run concurrently; errors are ordered afterwards
        tasks = [
            asyncio.to_thread(self.scorer.score, password, user_inputs),
            self.breach_checker.check(password, account_id, reason=reason),
        ]
        if check_history and self.history is not None and account_id:
            tasks.append(self.history.check_reuse(account_id, password))

        results = await asyncio.gather(*tasks)
        strength: StrengthEstimate = results[0]
        breach: BreachCheckResult = results[1]
        reuse: ReuseCheckResult = results[2] if len(results) > 2 else ReuseCheckResult()

        errors = self._length_errors(password)
        errors.extend(self._strength_errors(strength))

        if breach.is_breached:
            errors.append(
                f"Security Alert: This password has been exposed in "
                f"{format_breach_count(breach.breach_count)} data breaches and is not safe to use. "
                f"Please choose a unique password that you haven't used elsewhere."
            )

        if reuse.is_reused:
            errors.append(
                "Password History: You've used this password before. For security, "
                "please choose a new password you haven't used on this account."
            )

        degraded = []
        if breach.degraded:
            degraded.append("breach")
        if reuse.degraded:
            degraded.append("history")
        if degraded:
            logger.warning(f"Password validated with degraded checks: {', '.join(degraded)}")

        return ValidationResult(
            errors=errors,
            strength=PasswordStrength(
                score=strength.score,
                warning=strength.warning,
                suggestions=strength.suggestions,
                crack_time=strength.crack_time,
                is_breached=breach.is_breached,
                breach_count=breach.breach_count,
                is_reused=reuse.is_reused,
            ),
            degraded_checks=degraded,
        )

    def _length_errors(self, password: str) -> list[str]:
        errors = []
        if len(password) < self.min_length:
            errors.append(
                f"Password Length: Must be at least {self.min_length} characters long. "
                f"Current length: {len(password)}"
            )
        if len(password) > self.max_length:
            errors.append(
                f"Password Length: Must not exceed {self.max_length} characters. "
                f"Current length: {len(password)}"
            )
        return errors

    def _strength_errors(self, strength: StrengthEstimate) -> list[str]:
        if strength.score >= self.min_strength_score:
            return []

        warning = strength.warning or "This password is too predictable."
        errors = [f"Password Strength: Your password is too weak ({strength.score}/4). {warning}"]
        if strength.suggestions:
            errors.append(f"Suggestions: {' '.join(strength.suggestions)}")
        return errors
