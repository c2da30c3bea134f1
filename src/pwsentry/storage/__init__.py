"""
Storage backends for the breach cache and password history.
"""

from pwsentry.storage.base import (
    BreachCacheEntry,
    BreachCacheStore,
    ChangeReason,
    CheckReason,
    PasswordHistoryEntry,
    PasswordHistoryStore,
)
from pwsentry.storage.sqlite_backend import SQLiteStore

__all__ = [
    "BreachCacheEntry",
    "BreachCacheStore",
    "ChangeReason",
    "CheckReason",
    "PasswordHistoryEntry",
    "PasswordHistoryStore",
    "SQLiteStore",
]
