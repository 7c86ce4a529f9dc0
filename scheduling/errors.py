# scheduling/errors.py - Appointment engine error types


class CalendarError(Exception):
    """Base class for every error raised by the appointment engine"""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(CalendarError):
    """Malformed or out-of-range input (bad instants, unknown kinds or scopes)"""


class NotFound(CalendarError):
    """The targeted occurrence id does not exist"""


class StoreError(CalendarError):
    """The backing store could not be read or written"""
