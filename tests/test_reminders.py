"""Tests des règles de calendrier des rappels et du déclenchement planifié."""

from datetime import datetime

import pytest
from sqlalchemy import select

from contactvault.domain.calendar.errors import InvalidDate
from contactvault.domain.reminders import (
    CalendarFields,
    apply_calendar_fields,
    initial_schedule,
    next_schedule,
)
from contactvault.infra.repo.db import session_scope
from contactvault.infra.repo.models import ContactORM, ReminderORM, ReminderScheduleORM, VaultORM
from contactvault.infra.repositories import ReminderRepo

NOW = datetime(2026, 1, 10, 12, 0)


# Champs de calendrier


def test_gregorian_fields_drop_originals(container):
    requested = CalendarFields(day=14, month=2, original_day=3, original_month=4)
    fields = apply_calendar_fields(container.resolver, requested, NOW)
    assert fields == CalendarFields(calendar_type="gregorian", day=14, month=2)


def test_unsupported_type_falls_back_to_gregorian(container):
    requested = CalendarFields(calendar_type="hebrew", day=1, month=3, original_day=1, original_month=7)
    fields = apply_calendar_fields(container.resolver, requested, NOW)
    assert fields.calendar_type == "gregorian"
    assert (fields.day, fields.month, fields.original_day) == (1, 3, None)


def test_lunar_without_originals_keeps_type(container):
    requested = CalendarFields(calendar_type="lunar", day=9, month=9)
    fields = apply_calendar_fields(container.resolver, requested, NOW)
    assert fields == CalendarFields(calendar_type="lunar", day=9, month=9)


def test_lunar_with_year_is_converted(container):
    requested = CalendarFields(
        calendar_type="lunar", original_day=1, original_month=-6, original_year=2025
    )
    fields = apply_calendar_fields(container.resolver, requested, NOW)
    assert (fields.year, fields.month, fields.day) == (2025, 7, 25)
    assert fields.original_month == -6


def test_lunar_without_year_uses_next_occurrence(container):
    requested = CalendarFields(calendar_type="lunar", original_day=1, original_month=1)
    fields = apply_calendar_fields(container.resolver, requested, NOW)
    assert (fields.year, fields.month, fields.day) == (2026, 2, 17)
    assert fields.original_year is None


def test_invalid_lunar_original_is_rejected(container):
    requested = CalendarFields(calendar_type="lunar", original_day=31, original_month=1)
    with pytest.raises(InvalidDate):
        apply_calendar_fields(container.resolver, requested, NOW)


# Calcul des occurrences


def test_initial_schedule_moves_past_yearless_date_to_next_year():
    fields = CalendarFields(day=5, month=1)
    assert initial_schedule(fields, NOW, 9) == datetime(2027, 1, 5, 9)
    assert initial_schedule(CalendarFields(day=5, month=3), NOW, 9) == datetime(2026, 3, 5, 9)


def test_initial_schedule_keeps_explicit_year():
    fields = CalendarFields(day=5, month=1, year=2026)
    assert initial_schedule(fields, NOW, 9) == datetime(2026, 1, 5, 9)


def test_initial_schedule_clamps_feb_29():
    assert initial_schedule(CalendarFields(day=29, month=2), NOW, 9) == datetime(2026, 2, 28, 9)


@pytest.mark.parametrize(
    "kind,freq,expected",
    [
        ("recurring_week", 1, datetime(2026, 1, 17, 12, 0)),
        ("recurring_week", 2, datetime(2026, 1, 24, 12, 0)),
        ("recurring_month", 1, datetime(2026, 2, 10, 12, 0)),
        ("recurring_month", None, datetime(2026, 2, 10, 12, 0)),
        ("recurring_year", 1, datetime(2027, 1, 10, 12, 0)),
        ("recurring", 2, datetime(2028, 1, 10, 12, 0)),
        ("one_time", 1, None),
    ],
)
def test_next_schedule_cadences(container, kind, freq, expected):
    fields = CalendarFields(day=10, month=1)
    assert next_schedule(container.resolver, kind, freq, fields, NOW, 9) == expected


def test_lunar_yearly_reschedule_uses_resolver(container):
    fields = CalendarFields(
        calendar_type="lunar", day=17, month=2, year=2026, original_day=1, original_month=1
    )
    now = datetime(2026, 2, 17, 9, 5)
    assert next_schedule(container.resolver, "recurring_year", 1, fields, now, 9) == datetime(
        2027, 2, 6, 9
    )


# Planificateur


@pytest.fixture
def contact_id(container):
    container.init_db()
    with session_scope(container.session_factory) as s:
        vault = VaultORM(name="Famille")
        s.add(vault)
        s.flush()
        contact = ContactORM(vault_id=vault.id, first_name="Ada")
        s.add(contact)
        s.flush()
        return contact.id


def _create(container, contact_id, now=NOW, **columns) -> int:
    with session_scope(container.session_factory) as s:
        reminder = ReminderORM(contact_id=contact_id, label="Appeler", number_times_triggered=0)
        for name, value in columns.items():
            setattr(reminder, name, value)
        s.add(reminder)
        s.flush()
        container.scheduler.schedule(s, reminder, now=now)
        return reminder.id


def _schedules(container, reminder_id):
    with session_scope(container.session_factory) as s:
        return [(r.scheduled_at, r.triggered_at) for r in ReminderRepo(s).schedules(reminder_id)]


def _process(container, now) -> int:
    with session_scope(container.session_factory) as s:
        return container.scheduler.process_due(s, now=now)


def test_weekly_reminder_is_triggered_and_rescheduled(container, contact_id):
    reminder_id = _create(
        container, contact_id, type="recurring_week", frequency_number=1, day=5, month=1, year=2026
    )
    assert _schedules(container, reminder_id) == [(datetime(2026, 1, 5, 9), None)]

    assert _process(container, NOW) == 1
    assert _schedules(container, reminder_id) == [
        (datetime(2026, 1, 5, 9), NOW),
        (datetime(2026, 1, 17, 12, 0), None),
    ]
    with session_scope(container.session_factory) as s:
        reminder = s.get(ReminderORM, reminder_id)
        assert reminder.number_times_triggered == 1
        assert reminder.last_triggered_at == NOW

    assert _process(container, NOW) == 0


def test_monthly_reminder_respects_frequency(container, contact_id):
    reminder_id = _create(
        container, contact_id, type="recurring_month", frequency_number=2, day=1, month=1, year=2026
    )
    _process(container, NOW)
    assert _schedules(container, reminder_id)[-1] == (datetime(2026, 3, 10, 12, 0), None)


def test_gregorian_yearly_reminder(container, contact_id):
    reminder_id = _create(
        container, contact_id, type="recurring_year", frequency_number=1, day=5, month=1
    )
    assert _schedules(container, reminder_id) == [(datetime(2027, 1, 5, 9), None)]
    assert _process(container, NOW) == 0

    fired = datetime(2027, 1, 5, 9, 30)
    assert _process(container, fired) == 1
    assert _schedules(container, reminder_id)[-1] == (datetime(2028, 1, 5, 9, 30), None)


def test_lunar_yearly_reminder(container, contact_id):
    reminder_id = _create(
        container,
        contact_id,
        type="recurring",
        calendar_type="lunar",
        day=17,
        month=2,
        year=2026,
        original_day=1,
        original_month=1,
    )
    assert _schedules(container, reminder_id) == [(datetime(2026, 2, 17, 9), None)]
    _process(container, datetime(2026, 2, 17, 9, 5))
    assert _schedules(container, reminder_id)[-1] == (datetime(2027, 2, 6, 9), None)


def test_past_yearly_reminder_starts_at_next_occurrence(container, contact_id):
    reminder_id = _create(
        container, contact_id, type="recurring_year", day=20, month=12, year=2020
    )
    assert _schedules(container, reminder_id) == [(datetime(2026, 12, 20, 9), None)]


@pytest.mark.parametrize("year", [None, 1990])
def test_yearly_reminder_due_today_fires_today(container, year):
    """Un anniversaire du jour est planifié aujourd'hui, que son année soit connue ou non."""
    reminder = ReminderORM(type="recurring_year", day=14, month=2, year=year)
    first = container.scheduler.first_occurrence(reminder, datetime(2026, 2, 14, 7, 0))
    assert first == datetime(2026, 2, 14, 9)


def test_yearly_reminder_past_hour_moves_to_next_year(container):
    reminder = ReminderORM(type="recurring_year", day=14, month=2, year=1990)
    first = container.scheduler.first_occurrence(reminder, datetime(2026, 2, 14, 10, 0))
    assert first == datetime(2027, 2, 14, 9)


@pytest.mark.parametrize(
    "now,expected",
    [
        (datetime(2026, 2, 17, 8, 0), datetime(2026, 2, 17, 9)),
        (datetime(2026, 2, 17, 10, 0), datetime(2027, 2, 6, 9)),
    ],
)
def test_lunar_yearly_reminder_with_year_fires_on_todays_occurrence(container, now, expected):
    reminder = ReminderORM(
        type="recurring_year",
        calendar_type="lunar",
        day=27,
        month=1,
        year=1990,
        original_day=1,
        original_month=1,
        original_year=1990,
    )
    assert container.scheduler.first_occurrence(reminder, now) == expected


def test_one_time_reminder_is_not_rescheduled(container, contact_id):
    reminder_id = _create(container, contact_id, type="one_time", day=8, month=1, year=2026)
    assert _process(container, NOW) == 1
    assert _schedules(container, reminder_id) == [(datetime(2026, 1, 8, 9), NOW)]


def test_rescheduling_replaces_pending_occurrences(container, contact_id):
    reminder_id = _create(container, contact_id, type="one_time", day=8, month=6, year=2026)
    with session_scope(container.session_factory) as s:
        reminder = s.get(ReminderORM, reminder_id)
        reminder.month = 7
        container.scheduler.schedule(s, reminder, now=NOW)
    assert _schedules(container, reminder_id) == [(datetime(2026, 7, 8, 9), None)]


def test_deleting_reminder_removes_schedules(container, contact_id):
    reminder_id = _create(container, contact_id, type="one_time", day=8, month=6, year=2026)
    with session_scope(container.session_factory) as s:
        repo = ReminderRepo(s)
        repo.delete(s.get(ReminderORM, reminder_id))
    with session_scope(container.session_factory) as s:
        rows = s.execute(
            select(ReminderScheduleORM).where(
                ReminderScheduleORM.contact_reminder_id == reminder_id
            )
        ).all()
        assert rows == []
