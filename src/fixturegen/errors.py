"""Exceptions raised by the fixture generators."""


class SchedulingError(Exception):
    """Base exception for scheduling failures."""
    pass


class ConfigurationError(SchedulingError):
    """Raised when the inputs cannot produce a legal schedule.

    Not retried: no partial schedule is returned to the caller.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]
