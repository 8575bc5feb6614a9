"""Routes des rappels d'un contact.

Chaque écriture normalise les colonnes de calendrier puis (re)planifie la prochaine occurrence
du rappel ; `/next` expose l'occurrence en attente. `/vaults/{vault_id}/reminders` liste les rappels
de tout le coffre.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contactvault.api.deps import editor_gate, get_contact, get_container, get_session, viewer_gate
from contactvault.api.schemas import (
    NextReminderOut,
    ReminderIn,
    ReminderOut,
    ScheduleOut,
    VaultReminderOut,
)
from contactvault.core.container import Container
from contactvault.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from contactvault.domain.errors import NotFoundError
from contactvault.domain.reminders import CalendarFields, apply_calendar_fields
from contactvault.infra.repo.models import ContactORM, ReminderORM, utcnow
from contactvault.infra.repositories import ReminderRepo

router = APIRouter(
    prefix="/vaults/{vault_id}/contacts/{contact_id}/reminders",
    tags=["reminders"],
    dependencies=[Depends(viewer_gate)],
)
log = structlog.get_logger(__name__)


def _load(session: Session, contact: ContactORM, reminder_id: int) -> ReminderORM:
    reminder = ReminderRepo(session).get(contact.id, reminder_id)
    if reminder is None:
        raise NotFoundError("reminder", reminder_id)
    return reminder


def _write(container: Container, reminder: ReminderORM, payload: ReminderIn) -> None:
    reminder.label = payload.label
    reminder.type = payload.type
    reminder.frequency_number = payload.frequency_number or 1
    fields = apply_calendar_fields(container.resolver, CalendarFields.of(payload), utcnow())
    fields.apply_to(reminder)


@router.get("", response_model=list[ReminderOut])
def list_reminders(
    contact: ContactORM = Depends(get_contact), session: Session = Depends(get_session)
):
    return ReminderRepo(session).list(contact.id)


@router.post(
    "", response_model=ReminderOut, status_code=HTTP_CREATED, dependencies=[Depends(editor_gate)]
)
def create_reminder(
    payload: ReminderIn,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    """Crée le rappel et planifie sa première occurrence."""
    reminder = ReminderORM(contact_id=contact.id, number_times_triggered=0)
    _write(container, reminder, payload)
    ReminderRepo(session).save(reminder)
    container.scheduler.schedule(session, reminder)
    log.info("reminder_created", reminder_id=reminder.id, type=reminder.type)
    return reminder


@router.get("/{reminder_id}", response_model=ReminderOut)
def get_reminder(
    reminder_id: int,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    return _load(session, contact, reminder_id)


@router.put("/{reminder_id}", response_model=ReminderOut, dependencies=[Depends(editor_gate)])
def update_reminder(
    reminder_id: int,
    payload: ReminderIn,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    """Met à jour le rappel ; les occurrences en attente sont recalculées."""
    reminder = _load(session, contact, reminder_id)
    _write(container, reminder, payload)
    ReminderRepo(session).save(reminder)
    container.scheduler.schedule(session, reminder)
    return reminder


@router.delete(
    "/{reminder_id}", status_code=HTTP_NO_CONTENT, dependencies=[Depends(editor_gate)]
)
def delete_reminder(
    reminder_id: int,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    ReminderRepo(session).delete(_load(session, contact, reminder_id))


@router.get("/{reminder_id}/next", response_model=NextReminderOut)
def next_reminder(
    reminder_id: int,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    """Prochaine occurrence en attente du rappel (None si déjà déclenché et non récurrent)."""
    reminder = _load(session, contact, reminder_id)
    pending = [s for s in ReminderRepo(session).schedules(reminder.id) if s.triggered_at is None]
    return NextReminderOut(
        reminder_id=reminder.id, scheduled_at=pending[0].scheduled_at if pending else None
    )


@router.get("/{reminder_id}/schedules", response_model=list[ScheduleOut])
def list_schedules(
    reminder_id: int,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    """Historique des occurrences du rappel, déclenchées ou non."""
    return ReminderRepo(session).schedules(_load(session, contact, reminder_id).id)


vault_reminders_router = APIRouter(
    prefix="/vaults/{vault_id}/reminders",
    tags=["reminders"],
    dependencies=[Depends(viewer_gate)],
)


@vault_reminders_router.get("", response_model=list[VaultReminderOut])
def list_vault_reminders(vault_id: str, session: Session = Depends(get_session)):
    """Tous les rappels du coffre, les plus récents d'abord, avec le nom de leur contact."""
    return [
        VaultReminderOut(
            **ReminderOut.model_validate(reminder).model_dump(),
            contact_first_name=contact.first_name or "",
            contact_last_name=contact.last_name or "",
        )
        for reminder, contact in ReminderRepo(session).list_with_contacts(vault_id)
    ]
