"""Exceptions raised by the calendar components."""


class CalendarError(Exception):
    """Base class for calendar errors."""


class ValidationError(CalendarError):
    """Input rejected locally, before any backend call."""


class BackendError(CalendarError):
    """Listing, creating or deleting events (or downloading data) failed.

    ``written`` holds the events that were stored before a partial bulk
    write failed.
    """

    def __init__(self, message, written=None):
        super().__init__(message)
        self.written = list(written or [])
