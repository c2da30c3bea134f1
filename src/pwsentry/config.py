"""
Configuration for password security services.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pwsentry.exceptions import ConfigurationError
from pwsentry.hibp.checker import BreachChecker
from pwsentry.hibp.client import HIBPClient
from pwsentry.security.hashing import PasswordHasher
from pwsentry.security.history import HistoryEnforcer
from pwsentry.security.strength import StrengthScorer
from pwsentry.security.validator import PasswordValidator
from pwsentry.storage.sqlite_backend import SQLiteStore


def _env_bool(name: str, default: str = "") -> bool:
    return os.environ.get(name, default).lower() in ("true", "yes", "1")


@dataclass
class PasswordSecurityConfig:
    """Configuration for password security."""

    # Range API settings
    range_api_url: str = HIBPClient.PWNED_PASSWORDS_API
    user_agent: str = HIBPClient.DEFAULT_USER_AGENT
    request_timeout: float = HIBPClient.DEFAULT_TIMEOUT
    add_padding: bool = False

    # Cache settings
    cache_ttl_days: int = BreachChecker.CACHE_DURATION_DAYS

    # Policy
    history_limit: int = HistoryEnforcer.HISTORY_LIMIT
    min_length: int = PasswordValidator.MIN_LENGTH
    max_length: int = PasswordValidator.MAX_LENGTH
    min_strength_score: int = PasswordValidator.MIN_STRENGTH_SCORE

    # Storage
    sqlite_path: str | Path | None = None

    # Hashing
    bcrypt_rounds: int = PasswordHasher.DEFAULT_ROUNDS

    @classmethod
    def from_env(cls) -> "PasswordSecurityConfig":
        """Load configuration from environment variables."""
        try:
            return cls(
                range_api_url=os.environ.get("PWSENTRY_RANGE_API_URL", HIBPClient.PWNED_PASSWORDS_API),
                user_agent=os.environ.get("PWSENTRY_USER_AGENT", HIBPClient.DEFAULT_USER_AGENT),
                request_timeout=float(os.environ.get("PWSENTRY_REQUEST_TIMEOUT", HIBPClient.DEFAULT_TIMEOUT)),
                add_padding=_env_bool("PWSENTRY_ADD_PADDING"),
                cache_ttl_days=int(os.environ.get("PWSENTRY_CACHE_TTL_DAYS", BreachChecker.CACHE_DURATION_DAYS)),
                history_limit=int(os.environ.get("PWSENTRY_HISTORY_LIMIT", HistoryEnforcer.HISTORY_LIMIT)),
                min_length=int(os.environ.get("PWSENTRY_MIN_LENGTH", PasswordValidator.MIN_LENGTH)),
                max_length=int(os.environ.get("PWSENTRY_MAX_LENGTH", PasswordValidator.MAX_LENGTH)),
                min_strength_score=int(
                    os.environ.get("PWSENTRY_MIN_STRENGTH_SCORE", PasswordValidator.MIN_STRENGTH_SCORE)
                ),
                sqlite_path=os.environ.get("PWSENTRY_SQLITE_PATH"),
                bcrypt_rounds=int(os.environ.get("PWSENTRY_BCRYPT_ROUNDS", PasswordHasher.DEFAULT_ROUNDS)),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid PWSENTRY_* environment value: {e}") from e

    def get_sqlite_path(self) -> Path:
        """Get SQLite database path."""
        if self.sqlite_path:
            return Path(self.sqlite_path)
        return Path.home() / ".pwsentry" / "pwsentry.db"

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of errors."""
        errors = []

        if not self.range_api_url.startswith(("http://", "https://")):
            errors.append("Range API URL must be an http(s) URL")
        if self.request_timeout <= 0:
            errors.append("Request timeout must be positive")
        if self.cache_ttl_days <= 0:
            errors.append("Cache TTL must be at least one day")
        if self.history_limit <= 0:
            errors.append("History limit must be positive")
        if self.min_length <= 0 or self.max_length < self.min_length:
            errors.append("Length limits must satisfy 0 < min_length <= max_length")
        if not 0 <= self.min_strength_score <= 4:
            errors.append("Minimum strength score must be between 0 and 4")
        if not 4 <= self.bcrypt_rounds <= 31:
            errors.append("bcrypt rounds must be between 4 and 31")

        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "range_api_url": self.range_api_url,
            "user_agent": self.user_agent,
            "request_timeout": self.request_timeout,
            "add_padding": self.add_padding,
            "cache_ttl_days": self.cache_ttl_days,
            "history_limit": self.history_limit,
            "min_length": self.min_length,
            "max_length": self.max_length,
            "min_strength_score": self.min_strength_score,
            "sqlite_path": str(self.get_sqlite_path()),
            "bcrypt_rounds": self.bcrypt_rounds,
        }


@dataclass
class PasswordSecurity:
    """Wired-up services sharing one client and one store."""

    client: HIBPClient
    store: SQLiteStore
    breach_checker: BreachChecker
    history: HistoryEnforcer
    validator: PasswordValidator

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "PasswordSecurity":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def build_password_security(config: PasswordSecurityConfig | None = None) -> PasswordSecurity:
    """Build the default service stack (range API, SQLite, bcrypt, zxcvbn).

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = config or PasswordSecurityConfig.from_env()
    errors = config.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))

    client = HIBPClient(
        range_api_url=config.range_api_url,
        user_agent=config.user_agent,
        timeout=config.request_timeout,
        add_padding=config.add_padding,
    )
    store = SQLiteStore(config.get_sqlite_path())
    breach_checker = BreachChecker(client, cache=store, cache_ttl_days=config.cache_ttl_days)
    history = HistoryEnforcer(
        store,
        PasswordHasher(rounds=config.bcrypt_rounds),
        history_limit=config.history_limit,
    )
    validator = PasswordValidator(
        breach_checker,
        scorer=StrengthScorer(),
        history=history,
        min_length=config.min_length,
        max_length=config.max_length,
        min_strength_score=config.min_strength_score,
    )

    return PasswordSecurity(
        client=client,
        store=store,
        breach_checker=breach_checker,
        history=history,
        validator=validator,
    )
