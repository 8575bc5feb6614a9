"""
Règles métier des rappels et des dates importantes.

- `apply_calendar_fields` normalise les colonnes de calendrier avant écriture.
- `initial_schedule` / `next_schedule` calculent les occurrences planifiées.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime, timedelta

import structlog
from dateutil.relativedelta import relativedelta

from contactvault.domain.calendar.errors import CalendarError
from contactvault.domain.calendar.gregorian import clamp_day
from contactvault.domain.calendar.resolver import RecurrenceResolver
from contactvault.domain.calendar.types import GREGORIAN

log = structlog.get_logger(__name__)

ONE_TIME = "one_time"
RECURRING = "recurring"
RECURRING_WEEK = "recurring_week"
RECURRING_MONTH = "recurring_month"
RECURRING_YEAR = "recurring_year"
REMINDER_TYPES = (ONE_TIME, RECURRING, RECURRING_WEEK, RECURRING_MONTH, RECURRING_YEAR)
YEARLY_TYPES = (RECURRING, RECURRING_YEAR)


@dataclass(frozen=True)
class CalendarFields:
    """Colonnes de calendrier d'un rappel ou d'une date importante."""

    calendar_type: str = GREGORIAN
    day: int | None = None
    month: int | None = None
    year: int | None = None
    original_day: int | None = None
    original_month: int | None = None
    original_year: int | None = None

    @classmethod
    def of(cls, row) -> CalendarFields:
        """Lit les colonnes d'un objet ORM (ou de tout objet aux mêmes attributs)."""
        return cls(
            calendar_type=row.calendar_type or GREGORIAN,
            day=row.day,
            month=row.month,
            year=row.year,
            original_day=row.original_day,
            original_month=row.original_month,
            original_year=row.original_year,
        )

    def has_original(self) -> bool:
        return self.original_day is not None and self.original_month is not None

    def apply_to(self, row) -> None:
        """Recopie les colonnes sur `row`."""
        for name, value in asdict(self).items():
            setattr(row, name, value)


def apply_calendar_fields(
    resolver: RecurrenceResolver, requested: CalendarFields, now: datetime
) -> CalendarFields:
    """
    Normalise les champs de calendrier demandés.

    - grégorien (ou vide) : les champs `original_*` sont effacés, la date est gardée telle quelle ;
    - type non supporté : retombe sur grégorien, même traitement ;
    - type supporté sans date d'origine : type conservé, `original_*` effacés ;
    - type supporté avec date d'origine : la date grégorienne est recalculée, par conversion si
      l'année d'origine est connue, sinon comme prochaine occurrence après `now`.

    Raises:
        InvalidDate: si la date d'origine est hors domaine du calendrier.
    """
    kind = requested.calendar_type or GREGORIAN
    cleared = replace(requested, original_day=None, original_month=None, original_year=None)
    if kind == GREGORIAN or not resolver.registry.is_supported(kind):
        if kind != GREGORIAN:
            log.warning("unsupported_calendar_type_fallback", calendar_type=kind)
        return replace(cleared, calendar_type=GREGORIAN)
    if not requested.has_original():
        return replace(cleared, calendar_type=kind)

    if requested.original_year:
        g = resolver.to_gregorian(
            requested.original_day, requested.original_month, requested.original_year, kind
        )
    else:
        g = resolver.next_occurrence(
            requested.original_day, requested.original_month, None, kind, now
        )
    return replace(requested, calendar_type=kind, day=g.day, month=g.month, year=g.year)


def _at_hour(year: int, month: int, day: int, hour: int) -> datetime:
    return datetime(year, month, clamp_day(year, month, day), hour)


def initial_schedule(fields: CalendarFields, now: datetime, hour: int) -> datetime:
    """Première occurrence d'un rappel, à `hour` heures le jour de sa date grégorienne.

    Sans année, une date déjà passée cette année est reportée à l'année suivante.
    """
    year = fields.year if fields.year is not None else now.year
    scheduled = _at_hour(year, fields.month or 1, fields.day or 1, hour)
    if fields.year is None and scheduled < now:
        scheduled = _at_hour(year + 1, fields.month or 1, fields.day or 1, hour)
    return scheduled


def next_yearly_schedule(
    resolver: RecurrenceResolver, fields: CalendarFields, now: datetime, hour: int
) -> datetime | None:
    """Occurrence annuelle suivante pour un calendrier non grégorien ; None sinon ou en cas d'échec."""
    if fields.calendar_type in ("", GREGORIAN) or not fields.has_original():
        return None
    try:
        g = resolver.next_occurrence(
            fields.original_day, fields.original_month, None, fields.calendar_type, now
        )
    except CalendarError as err:
        log.warning(
            "yearly_reschedule_fallback",
            calendar_type=fields.calendar_type,
            error=str(err),
        )
        return None
    return datetime(g.year, g.month, g.day, hour)


def next_schedule(
    resolver: RecurrenceResolver,
    reminder_type: str,
    frequency: int | None,
    fields: CalendarFields,
    now: datetime,
    hour: int,
) -> datetime | None:
    """Occurrence suivante après un déclenchement à `now` ; None pour un rappel ponctuel."""
    freq = frequency or 1
    if reminder_type == RECURRING_WEEK:
        return now + timedelta(days=7 * freq)
    if reminder_type == RECURRING_MONTH:
        return now + relativedelta(months=freq)
    if reminder_type in YEARLY_TYPES:
        yearly = next_yearly_schedule(resolver, fields, now, hour)
        if yearly is not None:
            return yearly
        return now + relativedelta(years=freq)
    return None
