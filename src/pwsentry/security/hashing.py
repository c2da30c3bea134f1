"""
One-way password hashing with bcrypt.
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)


def _truncate_password(password: str, max_bytes: int = 72) -> bytes:
    """Truncate password to max_bytes for bcrypt compatibility."""
    return password.encode("utf-8")[:max_bytes]


class PasswordHasher:
    """Salted, slow one-way password hash.

    Any object with the same ``hash``/``verify`` methods can be used in its
    place by the history enforcer.
    """

    DEFAULT_ROUNDS = 12

    def __init__(self, rounds: int | None = None):
        """Initialize hasher.

        Args:
            rounds: bcrypt cost factor (4-31, default: 12)
        """
        self.rounds = self.DEFAULT_ROUNDS if rounds is None else rounds
        if not 4 <= self.rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")

    def hash(self, password: str) -> str:
        """Hash password using bcrypt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_truncate_password(password), salt).decode("ascii")

    def verify(self, password: str, hashed: str) -> bool:
        """Verify password against hash. Returns False for malformed hashes."""
        try:
            return bcrypt.checkpw(_truncate_password(password), hashed.encode("ascii"))
        except (ValueError, UnicodeEncodeError):
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False
