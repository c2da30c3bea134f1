"""
Data models for Pwned Passwords breach checks.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pwsentry.storage.base import utcnow


class RiskLevel(str, Enum):
    """Risk level based on password exposure."""

    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Highest breach count graded at each level; anything above is critical
RISK_CEILINGS = (
    (0, RiskLevel.SAFE),
    (9, RiskLevel.LOW),
    (99, RiskLevel.MEDIUM),
    (9_999, RiskLevel.HIGH),
)


def format_breach_count(count: int) -> str:
    """Format a breach count for user-facing messages (1500 -> '1.5k+')."""
    if count > 1000:
        return f"{count / 1000:.1f}k+"
    return str(count)


@dataclass
class BreachCheckResult:
    """Result of checking a password against Pwned Passwords.

    ``degraded`` is set when the range API could not be queried and the
    password was assumed clean. Callers can tell "checked and clean" from
    "could not check" through it.
    """

    breach_count: int = 0
    cached: bool = False
    degraded: bool = False
    error: str | None = None
    checked_at: datetime = field(default_factory=utcnow)
    # Never store the actual password or full digest!
    hash_prefix: str = ""  # Only first 5 chars of SHA-1

    @property
    def is_breached(self) -> bool:
        """Check if password was found in breaches."""
        return self.breach_count > 0

    @property
    def risk_level(self) -> RiskLevel:
        """Grade the exposure by how often the password appears in breaches."""
        for ceiling, level in RISK_CEILINGS:
            if self.breach_count <= ceiling:
                return level
        return RiskLevel.CRITICAL

    @property
    def risk_description(self) -> str:
        """Explain the result in terms of the password change policy."""
        if self.degraded:
            return "The breach database could not be reached. The password was allowed without a breach check."
        if not self.is_breached:
            return "Not found in the breach corpus. The breach check would accept this password."

        seen = format_breach_count(self.breach_count)
        if self.risk_level in (RiskLevel.LOW, RiskLevel.MEDIUM):
            return f"Found {seen} time(s) in the breach corpus. Password changes using it are rejected."
        return (
            f"Found {seen} times in the breach corpus and likely on attacker wordlists. "
            "Password changes using it are rejected; rotate it wherever it is still in use."
        )

    @classmethod
    def unavailable(cls, hash_prefix: str, error: str) -> "BreachCheckResult":
        """Fail-open result used when the range API cannot be queried."""
        return cls(hash_prefix=hash_prefix, degraded=True, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "is_breached": self.is_breached,
            "breach_count": self.breach_count,
            "risk_level": self.risk_level.value,
            "risk_description": self.risk_description,
            "checked_at": self.checked_at.isoformat(),
            "cached": self.cached,
            "degraded": self.degraded,
            "error": self.error,
        }
