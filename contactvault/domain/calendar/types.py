"""Calendar value types and the converter contract.

A `DateInfo` is a date expressed in some calendar system. For lunisolar
calendars a negative `month` marks a leap month (-4 = leap fourth month);
the magnitude is the ordinary month number. `GregorianDate` is always a
plain proleptic Gregorian date and is the canonical external representation.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Protocol

CalendarType = str

GREGORIAN: CalendarType = "gregorian"
LUNAR: CalendarType = "lunar"

# Anything the resolver accepts as a reference instant. Only the calendar day matters.
Instant = dt.datetime | dt.date


@dataclass(frozen=True)
class DateInfo:
    """Date in an arbitrary calendar; `year == 0` means "no known origin year"."""

    day: int
    month: int
    year: int = 0

    @property
    def is_leap_month(self) -> bool:
        return self.month < 0

    @property
    def abs_month(self) -> int:
        return abs(self.month)

    @classmethod
    def leap(cls, day: int, month: int, year: int = 0) -> DateInfo:
        """Build the date falling in the leap copy of `month`."""
        return cls(day=day, month=-abs(month), year=year)


@dataclass(frozen=True, order=True)
class GregorianDate:
    """Fully specified Gregorian date; ordered chronologically."""

    year: int
    month: int
    day: int

    def to_date(self) -> dt.date:
        return dt.date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, value: dt.date) -> GregorianDate:
        return cls(year=value.year, month=value.month, day=value.day)

    def isoformat(self) -> str:
        return self.to_date().isoformat()


def day_of(instant: Instant) -> dt.date:
    """Reduce a reference instant to its calendar day (in its own location)."""
    if isinstance(instant, dt.datetime):
        return instant.date()
    return instant


class Converter(Protocol):
    """Capabilities every registered calendar system exposes."""

    calendar_type: CalendarType
    max_day: int
    has_leap_months: bool

    def to_gregorian(self, date: DateInfo) -> GregorianDate: ...

    def from_gregorian(self, date: GregorianDate) -> DateInfo: ...

    def next_occurrence(self, original: DateInfo, after: Instant) -> GregorianDate: ...
