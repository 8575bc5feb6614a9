"""Errors raised by the calendar engine."""

from __future__ import annotations


class CalendarError(Exception):
    """Base error of the calendar engine."""

    code = "calendar_error"


class UnsupportedCalendar(CalendarError):
    """The requested calendar type is not registered."""

    code = "unsupported_calendar"

    def __init__(self, calendar_type: str) -> None:
        super().__init__(f"unsupported calendar type: {calendar_type!r}")
        self.calendar_type = calendar_type


class InvalidDate(CalendarError):
    """A date fails validation or falls outside a converter's table range."""

    code = "invalid_date"


class NoRecurrenceFound(CalendarError):
    """The recurrence scan exhausted its candidates without a future match."""

    code = "no_recurrence_found"


class RegistryFrozen(CalendarError):
    """Registration attempted after the registry started serving lookups."""

    code = "registry_frozen"
