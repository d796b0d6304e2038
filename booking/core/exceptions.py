"""Errors raised by the availability resolution functions."""


class SchedulingError(ValueError):
    """Base class for malformed scheduling input."""


class MalformedTimeFormat(SchedulingError):
    """Raised when a wall-clock value is not a valid 24-hour HH:MM string."""


class InvalidDuration(SchedulingError):
    """Raised when a duration or slot interval is not a positive number of minutes."""
