"""
Exception hierarchy for pwsentry.

Only infrastructure failures are raised. Policy failures (weak, breached or
reused passwords) are reported as validation errors, never as exceptions.
"""


class PwsentryError(Exception):
    """Base class for all pwsentry errors."""


class ConfigurationError(PwsentryError):
    """Invalid or incomplete configuration."""


class BreachServiceUnavailable(PwsentryError):
    """The breach range API could not be queried."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class StoreError(PwsentryError):
    """A cache or history store operation failed."""


class StoreUnavailable(StoreError):
    """The store is not provisioned or cannot be reached."""
