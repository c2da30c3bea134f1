"""
pwsentry - password security and breach detection.

Validates candidate passwords against the Pwned Passwords range API
(k-anonymity), a zxcvbn strength estimate and a per-account password
history.
"""

__version__ = "1.0.0"
