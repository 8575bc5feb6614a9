"""Tests du résolveur de récurrence : validation, erreurs et métriques."""

import datetime as dt

import pytest
from prometheus_client import REGISTRY

from contactvault.domain.calendar.errors import (
    InvalidDate,
    NoRecurrenceFound,
    UnsupportedCalendar,
)
from contactvault.domain.calendar.registry import CalendarRegistry, build_default_registry
from contactvault.domain.calendar.resolver import RecurrenceResolver
from contactvault.domain.calendar.types import DateInfo, GregorianDate


@pytest.fixture
def resolver():
    return RecurrenceResolver(build_default_registry())


def _count(calendar_type: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "recurrence_resolutions_total", {"calendar_type": calendar_type, "outcome": outcome}
    )
    return value or 0.0


def test_seed_cases(resolver):
    after = dt.date(2026, 1, 1)
    assert resolver.next_occurrence(14, 2, None, "gregorian", after) == GregorianDate(2026, 2, 14)
    assert resolver.next_occurrence(
        14, 2, None, "gregorian", dt.date(2026, 3, 1)
    ) == GregorianDate(2027, 2, 14)
    assert resolver.next_occurrence(15, 1, None, "lunar", after).year == 2026
    assert resolver.next_occurrence(15, 8, None, "lunar", dt.date(2026, 11, 1)).year == 2027


def test_original_year_is_ignored_for_matching(resolver):
    g = resolver.next_occurrence(14, 2, 1990, "gregorian", dt.date(2026, 1, 1))
    assert g == GregorianDate(2026, 2, 14)
    # hors de la table lunaire : accepté, seul (jour, mois) compte
    g = resolver.next_occurrence(15, 8, 1850, "lunar", dt.date(2026, 1, 1))
    assert g == GregorianDate(2026, 9, 25)


@pytest.mark.parametrize(
    "day,month,kind",
    [
        (1, 13, "gregorian"),
        (1, 0, "lunar"),
        (0, 5, "gregorian"),
        (32, 1, "gregorian"),
        (31, 1, "lunar"),
        (1, -4, "gregorian"),
    ],
)
def test_invalid_dates(resolver, day, month, kind):
    before = _count(kind, "invalid_date")
    with pytest.raises(InvalidDate):
        resolver.next_occurrence(day, month, None, kind, dt.date(2026, 1, 1))
    assert _count(kind, "invalid_date") == before + 1


def test_unsupported_calendar(resolver):
    with pytest.raises(UnsupportedCalendar) as exc:
        resolver.next_occurrence(1, 1, None, "hebrew", dt.date(2026, 1, 1))
    assert exc.value.code == "unsupported_calendar"
    with pytest.raises(UnsupportedCalendar):
        resolver.to_gregorian(1, 1, 2026, "hebrew")


def test_to_gregorian_requires_year(resolver):
    with pytest.raises(InvalidDate):
        resolver.to_gregorian(1, 1, 0, "lunar")
    assert resolver.to_gregorian(30, 2, 2025, "lunar") == GregorianDate(2025, 3, 28)


def test_from_gregorian_round_trip(resolver):
    info = resolver.from_gregorian(2025, 7, 25, "lunar")
    assert info == DateInfo(1, -6, 2025)
    assert resolver.to_gregorian(info.day, info.month, info.year, "lunar") == GregorianDate(
        2025, 7, 25
    )


def test_successful_resolution_is_counted(resolver):
    before = _count("gregorian", "ok")
    resolver.next_occurrence(1, 1, None, "gregorian", dt.date(2026, 6, 1))
    assert _count("gregorian", "ok") == before + 1


class StaleConverter:
    """Convertisseur défaillant qui renvoie la date de référence elle-même."""

    calendar_type = "stale"
    max_day = 31
    has_leap_months = False

    def to_gregorian(self, date):
        return GregorianDate(date.year, date.month, date.day)

    def from_gregorian(self, date):
        return DateInfo(date.day, date.month, date.year)

    def next_occurrence(self, original, after):
        return GregorianDate.from_date(after)


def test_non_future_result_is_reported_as_no_recurrence():
    registry = CalendarRegistry()
    registry.register(StaleConverter())
    resolver = RecurrenceResolver(registry)
    before = _count("stale", "no_recurrence_found")
    with pytest.raises(NoRecurrenceFound):
        resolver.next_occurrence(1, 1, None, "stale", dt.date(2026, 1, 1))
    assert _count("stale", "no_recurrence_found") == before + 1
