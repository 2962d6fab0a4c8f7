"""
Error types raised by the analytics components.

Empty inputs and unknown patient/medication ids are not errors: every
component returns a zero-valued result for them.
"""


class AnalyticsError(Exception):
    """Base class for analytics failures."""


class InvalidRangeError(AnalyticsError, ValueError):
    """Raised when a time range has start after end."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Start date {start} is after end date {end}")
