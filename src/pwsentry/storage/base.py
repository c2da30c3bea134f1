"""
Abstract base classes and models for breach cache and password history storage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utcnow() -> datetime:
    """Current time as an aware UTC datetime; all stored timestamps use it."""
    return datetime.now(timezone.utc)


class CheckReason(str, Enum):
    """Why a breach check was performed."""
    PASSWORD_CHANGE = "password_change"
    REGISTRATION = "registration"
    MANUAL = "manual"


class ChangeReason(str, Enum):
    """Source of a password change."""
    USER_ACTION = "user_action"
    ADMIN_RESET = "admin_reset"
    PASSWORD_RESET = "password_reset"
    FORCED_CHANGE = "forced_change"


@dataclass(frozen=True)
class BreachCacheEntry:
    """A cached breach lookup for one account and one password digest.

    Entries are never mutated. They are superseded by newer entries or
    removed by the expiry sweep.
    """
    account_id: str
    hash_prefix: str  # First 5 chars of SHA-1
    fingerprint: str  # Keyed digest fingerprint, never the raw digest
    is_breached: bool
    breach_count: int
    expires_at: datetime
    check_reason: CheckReason = CheckReason.PASSWORD_CHANGE
    created_at: datetime = field(default_factory=utcnow)

    def is_valid(self, now: datetime) -> bool:
        """Check whether the entry may still be served at ``now``."""
        return now < self.expires_at

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (excludes the fingerprint)."""
        return {
            "account_id": self.account_id,
            "hash_prefix": self.hash_prefix,
            "is_breached": self.is_breached,
            "breach_count": self.breach_count,
            "expires_at": self.expires_at.isoformat(),
            "check_reason": self.check_reason.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class PasswordHistoryEntry:
    """A previous password of an account, stored as a one-way hash."""
    account_id: str
    password_hash: str
    changed_at: datetime = field(default_factory=utcnow)
    id: int | None = None

    # Metadata
    ip_address: str | None = None
    user_agent: str | None = None
    change_reason: ChangeReason | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (excludes the hash)."""
        return {
            "id": self.id,
            "account_id": self.account_id,
            "changed_at": self.changed_at.isoformat(),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "change_reason": self.change_reason.value if self.change_reason else None,
        }


class BreachCacheStore(ABC):
    """Storage for breach lookup results.

    Implementations raise StoreError (or StoreUnavailable) on failure.
    """

    @abstractmethod
    async def get(
        self,
        account_id: str,
        hash_prefix: str,
        fingerprint: str,
        now: datetime,
    ) -> BreachCacheEntry | None:
        """Get the newest entry for the key that is still valid at ``now``."""
        pass

    @abstractmethod
    async def put(self, entry: BreachCacheEntry) -> None:
        """Insert a cache entry."""
        pass

    @abstractmethod
    async def delete_expired(self, before: datetime) -> int:
        """Delete entries expiring at or before ``before``. Returns count."""
        pass


class PasswordHistoryStore(ABC):
    """Storage for password history entries.

    Implementations raise StoreError (or StoreUnavailable) on failure.
    """

    @abstractmethod
    async def add(self, entry: PasswordHistoryEntry) -> int:
        """Insert a history entry. Returns entry ID."""
        pass

    @abstractmethod
    async def list_for_account(
        self,
        account_id: str,
        limit: int | None = None,
    ) -> list[PasswordHistoryEntry]:
        """List entries for an account, most recent first."""
        pass

    @abstractmethod
    async def delete(self, entry_ids: list[int]) -> int:
        """Delete entries by ID. Returns count."""
        pass
