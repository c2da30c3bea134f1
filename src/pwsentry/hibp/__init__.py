"""
Have I Been Pwned (HIBP) Pwned Passwords integration.

Provides password breach checking with k-anonymity and a per-account
result cache.
"""

from pwsentry.hibp.models import (
    BreachCheckResult,
    RiskLevel,
)
from pwsentry.hibp.client import HIBPClient
from pwsentry.hibp.checker import BreachChecker

__all__ = [
    "HIBPClient",
    "BreachChecker",
    "BreachCheckResult",
    "RiskLevel",
]
