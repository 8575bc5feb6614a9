"""Tests des types de dates du moteur de calendrier."""

import datetime as dt

from contactvault.domain.calendar.types import DateInfo, GregorianDate, day_of


def test_negative_month_marks_leap_month():
    d = DateInfo(day=1, month=-4, year=2020)
    assert d.is_leap_month
    assert d.abs_month == 4


def test_ordinary_month_is_not_leap():
    d = DateInfo(day=1, month=4)
    assert not d.is_leap_month
    assert d.abs_month == 4
    assert d.year == 0


def test_leap_builder_normalises_sign():
    assert DateInfo.leap(3, 6, 2025) == DateInfo(day=3, month=-6, year=2025)
    assert DateInfo.leap(3, -6).month == -6


def test_gregorian_date_orders_chronologically():
    assert GregorianDate(2025, 12, 31) < GregorianDate(2026, 1, 1)
    assert GregorianDate.from_date(dt.date(2026, 2, 14)).isoformat() == "2026-02-14"


def test_day_of_drops_time_of_day():
    assert day_of(dt.datetime(2026, 3, 1, 23, 59)) == dt.date(2026, 3, 1)
    assert day_of(dt.date(2026, 3, 1)) == dt.date(2026, 3, 1)
