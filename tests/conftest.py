"""
Pytest configuration and fixtures for pwsentry tests.
"""

import hashlib
from datetime import datetime, timedelta

import pytest

from pwsentry.exceptions import BreachServiceUnavailable, StoreUnavailable
from pwsentry.security.hashing import PasswordHasher
from pwsentry.security.strength import StrengthEstimate
from pwsentry.storage.sqlite_backend import SQLiteStore


def sha1_upper(password: str) -> str:
    return hashlib.sha1(password.encode("utf-8")).hexdigest().upper()


# ============================================================================
# TEST DOUBLES
# ============================================================================

class FakeRangeClient:
    """In-memory range API serving a known breach corpus."""

    def __init__(self, corpus: dict[str, int] | None = None, fail: bool = False):
        self.corpus = corpus or {}
        self.fail = fail
        self.requested: list[str] = []

    async def fetch_range(self, prefix: str) -> str:
        self.requested.append(prefix)
        if self.fail:
            raise BreachServiceUnavailable("Range API returned HTTP 503", status=503)

        lines = []
        for password, count in self.corpus.items():
            digest = sha1_upper(password)
            if digest.startswith(prefix):
                lines.append(f"{digest[5:]}:{count}")
        # Unrelated entries sharing the prefix
        lines.append(f"{'0' * 35}:7")
        lines.append(f"{'F' * 35}:0")
        return "\r\n".join(lines)


class FakeScorer:
    """Strength scorer returning a fixed estimate."""

    def __init__(self, score: int = 4, warning: str = "", suggestions: list[str] | None = None):
        self.estimate = StrengthEstimate(
            score=score,
            warning=warning,
            suggestions=suggestions or [],
            crack_time="centuries",
        )
        self.calls: list[tuple] = []

    def score(self, password, user_inputs=None) -> StrengthEstimate:
        self.calls.append((password, user_inputs))
        return self.estimate


class BrokenStore:
    """Cache and history store whose every operation fails."""

    async def get(self, *args, **kwargs):
        raise StoreUnavailable("Store not initialized: no such table: breach_checks")

    async def put(self, *args, **kwargs):
        raise StoreUnavailable("Store not initialized: no such table: breach_checks")

    async def delete_expired(self, *args, **kwargs):
        raise StoreUnavailable("Store not initialized: no such table: breach_checks")

    async def add(self, *args, **kwargs):
        raise StoreUnavailable("Store not initialized: no such table: password_history")

    async def list_for_account(self, *args, **kwargs):
        raise StoreUnavailable("Store not initialized: no such table: password_history")

    async def delete(self, *args, **kwargs):
        raise StoreUnavailable("Store not initialized: no such table: password_history")


class FrozenClock:
    """Controllable clock for cache expiry tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def store(tmp_path) -> SQLiteStore:
    """Initialized SQLite store in a temporary directory."""
    s = SQLiteStore(tmp_path / "pwsentry.db")
    s.initialize()
    return s


@pytest.fixture
def uninitialized_store(tmp_path) -> SQLiteStore:
    """SQLite store whose tables were never created."""
    return SQLiteStore(tmp_path / "missing.db")


@pytest.fixture
def hasher() -> PasswordHasher:
    """Fast bcrypt hasher for tests."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, 0))


@pytest.fixture
def breach_corpus() -> dict[str, int]:
    return {
        "password123": 2_500_000,
        "hunter2-but-longer": 42,
    }
