"""
daylog exception hierarchy.

All daylog exceptions inherit from DaylogError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.

Absence of a record is never an exception: store lookups return ``None``.
"""


class DaylogError(Exception):
    """Base exception class for all daylog errors."""


class ConfigurationError(DaylogError):
    """Raised for configuration errors (missing keys, invalid values)."""


class SecretNotFoundError(DaylogError):
    """Raised when a required secret cannot be found in any provider."""


class TransportError(DaylogError):
    """Raised when the entry store is unreachable or rejects a request."""


class PreconditionError(DaylogError):
    """Raised when an operation is invoked in a state that does not allow it."""


class PartialBatchError(DaylogError):
    """Raised when some writes of a multi-day batch failed.

    Attributes:
        written: Day keys whose upsert succeeded.
        failed: ``(day_key, message)`` pairs for the upserts that failed.
    """

    def __init__(self, message: str, written: list[str] | None = None, failed: list[tuple[str, str]] | None = None):
        super().__init__(message)
        self.written = list(written or [])
        self.failed = list(failed or [])
