"""Tests du convertisseur lunaire (calendrier chinois, mois intercalaires négatifs)."""

import datetime as dt

import pytest

from contactvault.domain.calendar import lunar_tables as tables
from contactvault.domain.calendar.errors import InvalidDate
from contactvault.domain.calendar.lunar import LunarConverter, days_in_month
from contactvault.domain.calendar.types import DateInfo, GregorianDate

conv = LunarConverter()


def test_known_new_years():
    assert conv.to_gregorian(DateInfo(1, 1, 2025)) == GregorianDate(2025, 1, 29)
    assert conv.to_gregorian(DateInfo(1, 1, 2026)) == GregorianDate(2026, 2, 17)
    assert conv.to_gregorian(DateInfo(1, 1, 1900)) == GregorianDate.from_date(tables.EPOCH)


def test_known_festivals_2025():
    assert conv.to_gregorian(DateInfo(15, 1, 2025)) == GregorianDate(2025, 2, 12)
    assert conv.to_gregorian(DateInfo(5, 5, 2025)) == GregorianDate(2025, 5, 31)
    assert conv.to_gregorian(DateInfo(15, 8, 2025)) == GregorianDate(2025, 10, 6)


def test_leap_month_2025():
    assert conv.leap_month(2025) == 6
    assert conv.to_gregorian(DateInfo(1, 6, 2025)) == GregorianDate(2025, 6, 25)
    assert conv.to_gregorian(DateInfo(1, -6, 2025)) == GregorianDate(2025, 7, 25)
    assert conv.from_gregorian(GregorianDate(2025, 7, 25)) == DateInfo(1, -6, 2025)


def test_year_without_requested_leap_month():
    with pytest.raises(InvalidDate):
        conv.to_gregorian(DateInfo(1, -5, 2025))


def test_lantern_festival_same_year():
    """15/1 vu du 1er janvier 2026 : pas encore passé en 2026."""
    g = conv.next_occurrence(DateInfo(15, 1), dt.date(2026, 1, 1))
    assert g.year == 2026
    assert dt.date(2026, 2, 1) <= g.to_date() <= dt.date(2026, 3, 31)
    assert g == GregorianDate(2026, 3, 3)


def test_mid_autumn_rollover():
    g = conv.next_occurrence(DateInfo(15, 8), dt.date(2026, 11, 1))
    assert g.year == 2027
    assert g.month == 9


def test_short_month_overflow_is_clamped():
    """Le mois 2 de 2025 compte 29 jours : le 30 est ramené au 29."""
    assert days_in_month(2025, 2) == 29
    g = conv.to_gregorian(DateInfo(30, 2, 2025))
    assert g == conv.to_gregorian(DateInfo(29, 2, 2025))
    assert g == GregorianDate(2025, 3, 28)


def test_leap_original_recurs_in_leap_month_when_present():
    g = conv.next_occurrence(DateInfo(1, -6), dt.date(2025, 7, 1))
    assert g == GregorianDate(2025, 7, 25)


def test_leap_original_falls_back_to_ordinary_month():
    g = conv.next_occurrence(DateInfo(1, -6), dt.date(2025, 8, 1))
    assert conv.leap_month(2026) != 6
    assert g == conv.to_gregorian(DateInfo(1, 6, 2026))


def test_out_of_table_years_are_invalid():
    with pytest.raises(InvalidDate):
        conv.to_gregorian(DateInfo(1, 1, 1899))
    with pytest.raises(InvalidDate):
        conv.to_gregorian(DateInfo(1, 1, tables.MAX_YEAR + 1))
    with pytest.raises(InvalidDate):
        conv.from_gregorian(GregorianDate(1900, 1, 30))


def test_round_trip_over_table_range():
    day = tables.EPOCH
    last = dt.date(2100, 12, 31)
    while day <= last:
        g = GregorianDate.from_date(day)
        d = conv.from_gregorian(g)
        assert conv.to_gregorian(d) == g
        assert conv.from_gregorian(conv.to_gregorian(d)) == d
        day += dt.timedelta(days=3)


def test_year_lengths_match_year_starts():
    for year in range(tables.MIN_YEAR, tables.MAX_YEAR + 1):
        i = year - tables.MIN_YEAR
        assert tables.YEAR_STARTS[i + 1] - tables.YEAR_STARTS[i] == tables.year_days(year)
        assert 353 <= tables.year_days(year) <= 385


@pytest.mark.parametrize("month", list(range(1, 13)))
def test_next_occurrence_is_strictly_future(month):
    for year in range(1901, 2099, 7):
        for after in (dt.date(year, 1, 1), dt.date(year, 6, 15), dt.date(year, 12, 31)):
            for day in (1, 15, 30):
                g = conv.next_occurrence(DateInfo(day, month), after)
                assert g.to_date() > after
                assert (g.to_date() - after).days <= 400
