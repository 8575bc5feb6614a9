"""Recurrence resolver: validates inputs and dispatches to the right converter."""

from __future__ import annotations

import structlog

from contactvault.app.metrics import RECURRENCE_RESOLUTIONS
from .errors import CalendarError, InvalidDate, NoRecurrenceFound, UnsupportedCalendar
from .registry import CalendarRegistry
from .types import CalendarType, Converter, DateInfo, GregorianDate, Instant, day_of

log = structlog.get_logger(__name__)


class RecurrenceResolver:
    """Entry point of the calendar engine.

    Calls are pure functions of their arguments and of the registry contents,
    which are frozen once the resolver starts serving lookups.
    """

    def __init__(self, registry: CalendarRegistry) -> None:
        self._registry = registry.freeze()

    @property
    def registry(self) -> CalendarRegistry:
        return self._registry

    def converter(self, calendar_type: CalendarType) -> Converter:
        converter = self._registry.get(calendar_type)
        if converter is None:
            raise UnsupportedCalendar(calendar_type)
        return converter

    @staticmethod
    def validate(date: DateInfo, converter: Converter, *, require_year: bool = False) -> None:
        """Range checks shared by every calendar; raises `InvalidDate`."""
        if date.is_leap_month and not converter.has_leap_months:
            raise InvalidDate(f"{converter.calendar_type} calendar has no leap months")
        if not 1 <= date.abs_month <= 12:
            raise InvalidDate(f"month {date.month} out of range")
        if not 1 <= date.day <= converter.max_day:
            raise InvalidDate(f"day {date.day} out of range 1-{converter.max_day}")
        if require_year and date.year == 0:
            raise InvalidDate("year is required for a conversion")

    def next_occurrence(
        self,
        original_day: int,
        original_month: int,
        original_year: int | None,
        calendar_type: CalendarType,
        after: Instant,
    ) -> GregorianDate:
        """Next Gregorian date, strictly after the day of `after`, on which the date recurs.

        `original_year` does not take part in matching and is not range-checked, so
        a birth year outside a converter's table is accepted.
        """
        original = DateInfo(day=original_day, month=original_month, year=original_year or 0)
        try:
            converter = self.converter(calendar_type)
            self.validate(original, converter)
            result = converter.next_occurrence(original, after)
            if result.to_date() <= day_of(after):
                raise NoRecurrenceFound(
                    f"{calendar_type} converter returned {result.isoformat()} which is not after "
                    f"{day_of(after).isoformat()}"
                )
        except CalendarError as err:
            RECURRENCE_RESOLUTIONS.labels(calendar_type, err.code).inc()
            if isinstance(err, NoRecurrenceFound):
                log.error("recurrence_not_found", calendar_type=calendar_type, error=str(err))
            raise
        RECURRENCE_RESOLUTIONS.labels(calendar_type, "ok").inc()
        return result

    def to_gregorian(
        self, day: int, month: int, year: int, calendar_type: CalendarType
    ) -> GregorianDate:
        converter = self.converter(calendar_type)
        date = DateInfo(day=day, month=month, year=year)
        self.validate(date, converter, require_year=True)
        return converter.to_gregorian(date)

    def from_gregorian(self, year: int, month: int, day: int, calendar_type: CalendarType) -> DateInfo:
        converter = self.converter(calendar_type)
        return converter.from_gregorian(GregorianDate(year=year, month=month, day=day))
