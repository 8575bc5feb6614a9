"""Tests du convertisseur grégorien : occurrence annuelle et politique du 29 février."""

import datetime as dt

import pytest

from contactvault.domain.calendar.errors import InvalidDate
from contactvault.domain.calendar.gregorian import GregorianConverter, clamp_day
from contactvault.domain.calendar.types import DateInfo, GregorianDate

conv = GregorianConverter()


def test_same_year_occurrence():
    """Saint-Valentin vue du 1er janvier : même année."""
    g = conv.next_occurrence(DateInfo(14, 2), dt.date(2026, 1, 1))
    assert g == GregorianDate(2026, 2, 14)


def test_rollover_to_next_year():
    g = conv.next_occurrence(DateInfo(14, 2), dt.date(2026, 3, 1))
    assert g == GregorianDate(2027, 2, 14)


def test_occurrence_on_reference_day_moves_to_next_year():
    g = conv.next_occurrence(DateInfo(14, 2), dt.datetime(2026, 2, 14, 8, 0))
    assert g == GregorianDate(2027, 2, 14)


def test_feb_29_clamps_in_common_years():
    assert conv.next_occurrence(DateInfo(29, 2), dt.date(2026, 1, 1)) == GregorianDate(2026, 2, 28)
    assert conv.next_occurrence(DateInfo(29, 2), dt.date(2027, 3, 1)) == GregorianDate(2028, 2, 29)


def test_annual_cadence():
    first = conv.next_occurrence(DateInfo(3, 7), dt.date(2030, 5, 1))
    second = conv.next_occurrence(DateInfo(3, 7), first.to_date())
    assert (second.year - first.year, second.month, second.day) == (1, first.month, first.day)


def test_clamp_day():
    assert clamp_day(2025, 4, 31) == 30
    assert clamp_day(2024, 2, 30) == 29
    assert clamp_day(2025, 1, 15) == 15


def test_identity_conversions():
    assert conv.to_gregorian(DateInfo(5, 6, 2024)) == GregorianDate(2024, 6, 5)
    assert conv.from_gregorian(GregorianDate(2024, 6, 5)) == DateInfo(5, 6, 2024)


def test_invalid_gregorian_date_is_rejected():
    with pytest.raises(InvalidDate):
        conv.to_gregorian(DateInfo(31, 4, 2025))
    with pytest.raises(InvalidDate):
        conv.from_gregorian(GregorianDate(2025, 2, 29))
