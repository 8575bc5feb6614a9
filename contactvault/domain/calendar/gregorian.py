"""Gregorian converter: identity conversions and yearly recurrence."""

from __future__ import annotations

import calendar as _cal
import datetime as dt

from .errors import InvalidDate
from .types import GREGORIAN, DateInfo, GregorianDate, Instant, day_of


def clamp_day(year: int, month: int, day: int) -> int:
    """Clamp `day` to the last valid day of `month` in `year` (Feb 29 -> Feb 28)."""
    return min(day, _cal.monthrange(year, month)[1])


class GregorianConverter:
    """Converter for the proleptic Gregorian calendar."""

    calendar_type = GREGORIAN
    max_day = 31
    has_leap_months = False

    def to_gregorian(self, date: DateInfo) -> GregorianDate:
        try:
            return GregorianDate.from_date(dt.date(date.year, date.month, date.day))
        except ValueError as err:
            raise InvalidDate(f"invalid gregorian date {date.year}-{date.month}-{date.day}") from err

    def from_gregorian(self, date: GregorianDate) -> DateInfo:
        try:
            date.to_date()
        except ValueError as err:
            raise InvalidDate(f"invalid gregorian date {date}") from err
        return DateInfo(day=date.day, month=date.month, year=date.year)

    def next_occurrence(self, original: DateInfo, after: Instant) -> GregorianDate:
        """Return the first `(month, day)` strictly after the day of `after`.

        A day beyond the month's length is clamped in the candidate year, so a
        Feb 29 original recurs on Feb 28 in common years.
        """
        ref = day_of(after)
        year = ref.year
        candidate = dt.date(year, original.month, clamp_day(year, original.month, original.day))
        if candidate <= ref:
            year += 1
            candidate = dt.date(year, original.month, clamp_day(year, original.month, original.day))
        return GregorianDate.from_date(candidate)
