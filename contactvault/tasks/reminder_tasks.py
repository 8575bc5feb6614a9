"""
Tâches Celery des rappels.

Le scan périodique déclenche les occurrences échues et replanifie les rappels récurrents, dans
une transaction unique.
"""

from __future__ import annotations

import structlog

from contactvault.app.celery_app import celery_app
from contactvault.core.container import Container, container
from contactvault.infra.repo.db import session_scope

log = structlog.get_logger(__name__)


def run_due_reminders(app_container: Container | None = None) -> int:
    """Traite les rappels échus ; retourne le nombre d'occurrences déclenchées."""
    app_container = app_container or container
    with session_scope(app_container.session_factory) as session:
        count = app_container.scheduler.process_due(session)
    if count:
        log.info("due_reminders_processed", count=count)
    return count


@celery_app.task(name="contactvault.tasks.process_due_reminders")
def process_due_reminders_task() -> int:
    return run_due_reminders()
