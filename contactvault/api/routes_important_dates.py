"""Routes des dates importantes d'un contact (anniversaires, fêtes, ...).

Les colonnes de calendrier sont normalisées par `apply_calendar_fields` : une date saisie en
calendrier lunaire est stockée avec sa date d'origine et sa date grégorienne calculée.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contactvault.api.deps import editor_gate, get_contact, get_container, get_session, viewer_gate
from contactvault.api.schemas import ImportantDateIn, ImportantDateOut
from contactvault.core.container import Container
from contactvault.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from contactvault.domain.errors import NotFoundError
from contactvault.domain.reminders import CalendarFields, apply_calendar_fields
from contactvault.infra.repo.models import ContactORM, ImportantDateORM, utcnow
from contactvault.infra.repositories import ImportantDateRepo

router = APIRouter(
    prefix="/vaults/{vault_id}/contacts/{contact_id}/important-dates",
    tags=["important-dates"],
    dependencies=[Depends(viewer_gate)],
)


def _load(session: Session, contact: ContactORM, date_id: int) -> ImportantDateORM:
    row = ImportantDateRepo(session).get(contact.id, date_id)
    if row is None:
        raise NotFoundError("important_date", date_id)
    return row


def _write(container: Container, row: ImportantDateORM, payload: ImportantDateIn) -> None:
    row.label = payload.label
    fields = apply_calendar_fields(container.resolver, CalendarFields.of(payload), utcnow())
    fields.apply_to(row)


@router.get("", response_model=list[ImportantDateOut])
def list_important_dates(
    contact: ContactORM = Depends(get_contact), session: Session = Depends(get_session)
):
    return ImportantDateRepo(session).list(contact.id)


@router.post(
    "",
    response_model=ImportantDateOut,
    status_code=HTTP_CREATED,
    dependencies=[Depends(editor_gate)],
)
def create_important_date(
    payload: ImportantDateIn,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    row = ImportantDateORM(contact_id=contact.id)
    _write(container, row, payload)
    return ImportantDateRepo(session).save(row)


@router.get("/{date_id}", response_model=ImportantDateOut)
def get_important_date(
    date_id: int,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    return _load(session, contact, date_id)


@router.put("/{date_id}", response_model=ImportantDateOut, dependencies=[Depends(editor_gate)])
def update_important_date(
    date_id: int,
    payload: ImportantDateIn,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    row = _load(session, contact, date_id)
    _write(container, row, payload)
    return ImportantDateRepo(session).save(row)


@router.delete(
    "/{date_id}", status_code=HTTP_NO_CONTENT, dependencies=[Depends(editor_gate)]
)
def delete_important_date(
    date_id: int,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    ImportantDateRepo(session).delete(_load(session, contact, date_id))
