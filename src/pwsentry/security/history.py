"""
Password history tracking and reuse prevention.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from pwsentry.exceptions import StoreError
from pwsentry.security.hashing import PasswordHasher
from pwsentry.storage.base import ChangeReason, PasswordHistoryEntry, PasswordHistoryStore, utcnow

logger = logging.getLogger(__name__)


@dataclass
class ReuseCheckResult:
    """Outcome of a history lookup.

    ``degraded`` means the history could not be read and the password was
    assumed not reused.
    """

    is_reused: bool = False
    degraded: bool = False


class HistoryEnforcer:
    """Keeps the last N password hashes per account and rejects reuse."""

    HISTORY_LIMIT = 10  # Store last 10 passwords

    def __init__(
        self,
        store: PasswordHistoryStore,
        hasher: PasswordHasher,
        history_limit: int | None = None,
    ):
        self.store = store
        self.hasher = hasher
        self.history_limit = self.HISTORY_LIMIT if history_limit is None else history_limit

    async def check_reuse(self, account_id: str, password: str) -> ReuseCheckResult:
        """Check the candidate against the account's recent password hashes.

        Args:
            account_id: Account ID
            password: Plain text candidate password

        Returns:
            ReuseCheckResult. Never raises on store failure.
        """
        try:
            history = await self.store.list_for_account(account_id, limit=self.history_limit)
        except StoreError as e:
            # Can't verify history; allow the password
            logger.warning(f"Failed to check password history (store may not exist): {e}")
            return ReuseCheckResult(degraded=True)

        for entry in history:
            # bcrypt is CPU bound; keep it off the event loop
            matches = await asyncio.to_thread(self.hasher.verify, password, entry.password_hash)
            if matches:
                return ReuseCheckResult(is_reused=True)

        return ReuseCheckResult()

    async def was_used_before(self, account_id: str, password: str) -> bool:
        """Check if password has been used before by this account."""
        result = await self.check_reuse(account_id, password)
        return result.is_reused

    async def record(
        self,
        account_id: str,
        password_hash: str,
        changed_at: datetime | None = None,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
        change_reason: ChangeReason | None = None,
    ) -> bool:
        """Record a password change and enforce the retention limit.

        Every entry beyond the ``history_limit`` most recent is deleted on
        each call. Failures are logged; the password change itself must
        still succeed.

        Returns:
            True if the entry was recorded and pruned
        """
        entry = PasswordHistoryEntry(
            account_id=account_id,
            password_hash=password_hash,
            changed_at=changed_at or utcnow(),
            ip_address=ip_address,
            user_agent=user_agent,
            change_reason=change_reason,
        )

        try:
            await self.store.add(entry)

            history = await self.store.list_for_account(account_id)
            overflow = [e.id for e in history[self.history_limit:] if e.id is not None]
            if overflow:
                deleted = await self.store.delete(overflow)
                logger.debug(f"Pruned {deleted} old password history entries for account {account_id}")

        except StoreError as e:
            logger.warning(f"Failed to record password change (store may not exist): {e}")
            return False

        return True

    async def record_password(
        self,
        account_id: str,
        password: str,
        changed_at: datetime | None = None,
        **metadata,
    ) -> bool:
        """Hash a new plaintext password and record it in the history."""
        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        return await self.record(account_id, password_hash, changed_at, **metadata)
