"""
Password strength, history and validation services.
"""

from pwsentry.security.hashing import PasswordHasher
from pwsentry.security.history import HistoryEnforcer, ReuseCheckResult
from pwsentry.security.strength import StrengthEstimate, StrengthScorer
from pwsentry.security.validator import PasswordStrength, PasswordValidator, ValidationResult

__all__ = [
    "PasswordHasher",
    "HistoryEnforcer",
    "ReuseCheckResult",
    "StrengthEstimate",
    "StrengthScorer",
    "PasswordStrength",
    "PasswordValidator",
    "ValidationResult",
]
