"""
Breach checker with per-account result caching.

Every failure is handled fail-open: an unreachable range API or a broken
cache store never blocks password validation.
"""

import hashlib
import hmac
import logging
from datetime import datetime, timedelta
from typing import Callable

from pwsentry.exceptions import BreachServiceUnavailable, StoreError
from pwsentry.hibp.client import HIBPClient, hash_password_sha1, parse_range_response
from pwsentry.hibp.models import BreachCheckResult
from pwsentry.storage.base import BreachCacheEntry, BreachCacheStore, CheckReason, utcnow

logger = logging.getLogger(__name__)


def digest_fingerprint(account_id: str, prefix: str, suffix: str) -> str:
    """Keyed fingerprint of a full SHA-1 digest, scoped to one account.

    Used as the cache key together with the prefix so that two passwords
    sharing a prefix never share a cache entry. The raw digest is not
    stored.
    """
    return hmac.new(
        account_id.encode("utf-8"),
        f"{prefix}{suffix}".encode("ascii"),
        hashlib.sha256,
    ).hexdigest()


class BreachChecker:
    """Checks passwords against the range API using k-anonymity."""

    CACHE_DURATION_DAYS = 30

    def __init__(
        self,
        client: HIBPClient,
        cache: BreachCacheStore | None = None,
        cache_ttl_days: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize breach checker.

        Args:
            client: Range API client
            cache: Optional cache store; without one nothing is cached
            cache_ttl_days: Cache lifetime in days (default: 30)
            clock: Returns the current time (default: aware UTC)
        """
        self.client = client
        self.cache = cache
        self.cache_ttl = timedelta(
            days=self.CACHE_DURATION_DAYS if cache_ttl_days is None else cache_ttl_days
        )
        self.clock = clock

    async def check(
        self,
        password: str,
        account_id: str | None = None,
        reason: CheckReason = CheckReason.PASSWORD_CHANGE,
    ) -> BreachCheckResult:
        """Check if a password has been exposed in data breaches.

        Args:
            password: Plain text password (NOT stored or logged)
            account_id: Optional account ID; enables caching
            reason: Why the check is performed, stored with the cache entry

        Returns:
            BreachCheckResult. Never raises on infrastructure failure.
        """
        prefix, suffix = hash_password_sha1(password)

        fingerprint = None
        if account_id and self.cache is not None:
            fingerprint = digest_fingerprint(account_id, prefix, suffix)
            cached = await self._get_cached(account_id, prefix, fingerprint)
            if cached is not None:
                return cached

        try:
            body = await self.client.fetch_range(prefix)
        except BreachServiceUnavailable as e:
            # Availability over strictness: allow the password, log the outage
            logger.warning(f"Breach check unavailable, allowing password by default: {e}")
            return BreachCheckResult.unavailable(prefix, str(e))

        result = BreachCheckResult(
            breach_count=parse_range_response(body, suffix),
            hash_prefix=prefix,
        )

        if fingerprint is not None:
            await self._set_cached(account_id, prefix, fingerprint, result, reason)

        return result

    async def _get_cached(
        self,
        account_id: str,
        prefix: str,
        fingerprint: str,
    ) -> BreachCheckResult | None:
        """Get a cached result if one is still valid."""
        now = self.clock()
        try:
            entry = await self.cache.get(account_id, prefix, fingerprint, now)
        except StoreError as e:
            logger.warning(f"Failed to read breach cache (store may not exist): {e}")
            return None

        if entry is None or not entry.is_valid(now):
            return None

        return BreachCheckResult(
            breach_count=entry.breach_count,
            cached=True,
            hash_prefix=prefix,
        )

    async def _set_cached(
        self,
        account_id: str,
        prefix: str,
        fingerprint: str,
        result: BreachCheckResult,
        reason: CheckReason,
    ) -> None:
        """Cache a result. Failures are logged and swallowed."""
        now = self.clock()
        entry = BreachCacheEntry(
            account_id=account_id,
            hash_prefix=prefix,
            fingerprint=fingerprint,
            is_breached=result.is_breached,
            breach_count=result.breach_count,
            expires_at=now + self.cache_ttl,
            check_reason=reason,
            created_at=now,
        )
        try:
            await self.cache.put(entry)
        except StoreError as e:
            logger.warning(f"Failed to cache breach check result: {e}")

    async def cleanup_expired(self, now: datetime | None = None) -> int:
        """Delete expired cache entries.

        Idempotent; safe to run while lookups are in flight. Should be
        called periodically.

        Returns:
            Number of entries deleted (0 on failure)
        """
        if self.cache is None:
            return 0

        try:
            deleted = await self.cache.delete_expired(now or self.clock())
        except StoreError as e:
            logger.error(f"Failed to clean up expired breach checks: {e}")
            return 0

        logger.info(f"Removed {deleted} expired breach check(s)")
        return deleted
