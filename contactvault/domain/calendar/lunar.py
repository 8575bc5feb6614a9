"""Chinese lunisolar converter backed by the month-length table.

Leap months are encoded with a negative month number. Conversions outside the
table range raise `InvalidDate` instead of extrapolating.
"""

from __future__ import annotations

import bisect
import datetime as dt

from . import lunar_tables as tables
from .errors import InvalidDate, NoRecurrenceFound
from .types import LUNAR, DateInfo, GregorianDate, Instant, day_of


def _check_year(year: int) -> None:
    if not tables.MIN_YEAR <= year <= tables.MAX_YEAR:
        raise InvalidDate(
            f"lunar year {year} outside supported range {tables.MIN_YEAR}-{tables.MAX_YEAR}"
        )


def days_in_month(year: int, month: int) -> int:
    """Length of lunar month `month` (signed) in `year`.

    Raises `InvalidDate` when the year is outside the table or when a leap
    month is requested that the year does not have.
    """
    _check_year(year)
    abs_month = abs(month)
    if not 1 <= abs_month <= 12:
        raise InvalidDate(f"lunar month {month} out of range")
    if month < 0:
        if tables.leap_month(year) != abs_month:
            raise InvalidDate(f"lunar year {year} has no leap month {abs_month}")
        return tables.leap_month_days(year)
    return tables.month_days(year, abs_month)


class LunarConverter:
    """Converter between the Chinese lunisolar calendar and Gregorian dates."""

    calendar_type = LUNAR
    max_day = 30
    has_leap_months = True

    @staticmethod
    def leap_month(year: int) -> int:
        _check_year(year)
        return tables.leap_month(year)

    def to_gregorian(self, date: DateInfo) -> GregorianDate:
        """Convert a lunar date; a day past the month's end is clamped to its last day."""
        length = days_in_month(date.year, date.month)
        if date.day < 1:
            raise InvalidDate(f"lunar day {date.day} out of range")
        day = min(date.day, length)

        leap = tables.leap_month(date.year)
        offset = tables.YEAR_STARTS[date.year - tables.MIN_YEAR]
        for m in range(1, date.abs_month):
            offset += tables.month_days(date.year, m)
            if m == leap:
                offset += tables.leap_month_days(date.year)
        if date.is_leap_month:
            offset += tables.month_days(date.year, date.abs_month)
        offset += day - 1
        return GregorianDate.from_date(tables.EPOCH + dt.timedelta(days=offset))

    def from_gregorian(self, date: GregorianDate) -> DateInfo:
        try:
            offset = (date.to_date() - tables.EPOCH).days
        except ValueError as err:
            raise InvalidDate(f"invalid gregorian date {date}") from err
        if offset < 0 or offset >= tables.YEAR_STARTS[-1]:
            raise InvalidDate(f"gregorian date {date.isoformat()} outside lunar table range")

        index = bisect.bisect_right(tables.YEAR_STARTS, offset) - 1
        year = tables.MIN_YEAR + index
        offset -= tables.YEAR_STARTS[index]
        leap = tables.leap_month(year)
        for m in range(1, 13):
            length = tables.month_days(year, m)
            if offset < length:
                return DateInfo(day=offset + 1, month=m, year=year)
            offset -= length
            if m == leap:
                length = tables.leap_month_days(year)
                if offset < length:
                    return DateInfo(day=offset + 1, month=-m, year=year)
                offset -= length
        # YEAR_STARTS is built from the same month lengths.
        raise InvalidDate(f"gregorian date {date.isoformat()} could not be placed in lunar year {year}")

    def month_for_year(self, original: DateInfo, year: int) -> int:
        """Signed month to use for `original` in lunar `year`.

        A leap-month original recurs in the leap month when `year` has the same
        leap month and in the ordinary month otherwise. Ordinary originals
        always use the ordinary month.
        """
        if not original.is_leap_month:
            return original.month
        if self.leap_month(year) == original.abs_month:
            return -original.abs_month
        return original.abs_month

    def occurrence_in_year(self, original: DateInfo, year: int) -> GregorianDate:
        month = self.month_for_year(original, year)
        day = min(original.day, days_in_month(year, month))
        return self.to_gregorian(DateInfo(day=day, month=month, year=year))

    def next_occurrence(self, original: DateInfo, after: Instant) -> GregorianDate:
        ref = day_of(after)
        start = self.from_gregorian(GregorianDate.from_date(ref)).year
        # A yearly event never skips more than one lunar year relative to `ref`.
        for year in (start, start + 1):
            candidate = self.occurrence_in_year(original, year)
            if candidate.to_date() > ref:
                return candidate
        raise NoRecurrenceFound(
            f"no lunar occurrence of {original.month}/{original.day} after {ref.isoformat()}"
        )
