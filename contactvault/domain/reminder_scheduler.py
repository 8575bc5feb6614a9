"""
Planification et déclenchement des rappels.

`ReminderScheduler` crée la première occurrence d'un rappel et traite les occurrences échues :
marquage, compteur de déclenchements, puis replanification des rappels récurrents. L'envoi
effectif des notifications (SMTP, Telegram) n'est pas géré ici ; le déclenchement est journalisé.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import structlog
from sqlalchemy.orm import Session

from contactvault.app.metrics import REMINDERS_TRIGGERED
from contactvault.domain.calendar.resolver import RecurrenceResolver
from contactvault.domain.calendar.types import GREGORIAN
from contactvault.domain.reminders import (
    ONE_TIME,
    YEARLY_TYPES,
    CalendarFields,
    initial_schedule,
    next_schedule,
)
from contactvault.infra.repo.models import ReminderORM, utcnow
from contactvault.infra.repositories import ReminderRepo

log = structlog.get_logger(__name__)


class ReminderScheduler:
    """Service de planification des rappels."""

    def __init__(self, resolver: RecurrenceResolver, reminder_hour: int = 9) -> None:
        self.resolver = resolver
        self.reminder_hour = reminder_hour

    def first_occurrence(self, reminder: ReminderORM, now: datetime) -> datetime:
        """Première occurrence ; un rappel annuel déjà passé avance à sa prochaine date.

        L'année d'origine ne change rien au déclenchement : un anniversaire qui tombe aujourd'hui
        est planifié aujourd'hui à `reminder_hour` si cette heure n'est pas encore passée.
        """
        fields = CalendarFields.of(reminder)
        scheduled = initial_schedule(fields, now, self.reminder_hour)
        if scheduled >= now or reminder.type not in YEARLY_TYPES:
            return scheduled
        if fields.calendar_type != GREGORIAN and fields.has_original():
            day, month, kind = fields.original_day, fields.original_month, fields.calendar_type
        else:
            day, month, kind = fields.day or 1, fields.month or 1, GREGORIAN
        # le résolveur exclut le jour de référence : partir de la veille garde aujourd'hui
        g = self.resolver.next_occurrence(day, month, None, kind, now - timedelta(days=1))
        scheduled = datetime(g.year, g.month, g.day, self.reminder_hour)
        if scheduled >= now:
            return scheduled
        g = self.resolver.next_occurrence(day, month, None, kind, now)
        return datetime(g.year, g.month, g.day, self.reminder_hour)

    def schedule(self, session: Session, reminder: ReminderORM, now: datetime | None = None):
        """(Re)planifie un rappel : efface les occurrences en attente puis en crée une."""
        now = now or utcnow()
        repo = ReminderRepo(session)
        repo.clear_pending(reminder.id)
        scheduled_at = self.first_occurrence(reminder, now)
        row = repo.add_schedule(reminder.id, scheduled_at)
        log.debug(
            "reminder_scheduled",
            reminder_id=reminder.id,
            scheduled_at=scheduled_at.isoformat(),
        )
        return row

    def process_due(self, session: Session, now: datetime | None = None) -> int:
        """Déclenche toutes les occurrences échues et retourne leur nombre."""
        now = now or utcnow()
        repo = ReminderRepo(session)
        due = repo.due_schedules(now)
        if not due:
            return 0
        log.info("due_reminders_found", count=len(due))
        for scheduled in due:
            reminder = session.get(ReminderORM, scheduled.contact_reminder_id)
            scheduled.triggered_at = now
            reminder.last_triggered_at = now
            reminder.number_times_triggered = (reminder.number_times_triggered or 0) + 1
            REMINDERS_TRIGGERED.labels(reminder.type).inc()
            log.info(
                "reminder_triggered",
                reminder_id=reminder.id,
                contact_id=reminder.contact_id,
                label=reminder.label,
            )
            self._reschedule(repo, reminder, now)
        session.flush()
        return len(due)

    def _reschedule(self, repo: ReminderRepo, reminder: ReminderORM, now: datetime) -> None:
        if reminder.type == ONE_TIME:
            return
        next_at = next_schedule(
            self.resolver,
            reminder.type,
            reminder.frequency_number,
            CalendarFields.of(reminder),
            now,
            self.reminder_hour,
        )
        if next_at is None:
            log.warning("unknown_reminder_type", reminder_id=reminder.id, type=reminder.type)
            return
        repo.add_schedule(reminder.id, next_at)
