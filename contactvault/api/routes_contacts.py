"""Routes des contacts d'un coffre et de leurs notes.

Toutes les routes passent la garde Viewer du routeur ; les écritures ajoutent la garde Editor.
Un contact d'un autre coffre répond 404 `contact_not_found`.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contactvault.api.deps import editor_gate, get_contact, get_session, viewer_gate
from contactvault.api.schemas import ContactIn, ContactOut, NoteIn, NoteOut
from contactvault.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from contactvault.domain.errors import NotFoundError
from contactvault.infra.repo.models import ContactORM, NoteORM
from contactvault.infra.repositories import ContactRepo, NoteRepo

router = APIRouter(
    prefix="/vaults/{vault_id}/contacts",
    tags=["contacts"],
    dependencies=[Depends(viewer_gate)],
)


@router.get("", response_model=list[ContactOut])
def list_contacts(vault_id: str, session: Session = Depends(get_session)):
    return ContactRepo(session).list(vault_id)


@router.post(
    "", response_model=ContactOut, status_code=HTTP_CREATED, dependencies=[Depends(editor_gate)]
)
def create_contact(vault_id: str, payload: ContactIn, session: Session = Depends(get_session)):
    return ContactRepo(session).save(ContactORM(vault_id=vault_id, **payload.model_dump()))


@router.get("/{contact_id}", response_model=ContactOut)
def get_contact_route(contact: ContactORM = Depends(get_contact)):
    return contact


@router.put("/{contact_id}", response_model=ContactOut, dependencies=[Depends(editor_gate)])
def update_contact(
    payload: ContactIn,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    for field, value in payload.model_dump().items():
        setattr(contact, field, value)
    return ContactRepo(session).save(contact)


@router.delete(
    "/{contact_id}", status_code=HTTP_NO_CONTENT, dependencies=[Depends(editor_gate)]
)
def delete_contact(
    contact: ContactORM = Depends(get_contact), session: Session = Depends(get_session)
):
    ContactRepo(session).delete(contact)


# Notes


def _load_note(session: Session, contact: ContactORM, note_id: int) -> NoteORM:
    note = NoteRepo(session).get(contact.id, note_id)
    if note is None:
        raise NotFoundError("note", note_id)
    return note


@router.get("/{contact_id}/notes", response_model=list[NoteOut])
def list_notes(contact: ContactORM = Depends(get_contact), session: Session = Depends(get_session)):
    return NoteRepo(session).list(contact.id)


@router.post(
    "/{contact_id}/notes",
    response_model=NoteOut,
    status_code=HTTP_CREATED,
    dependencies=[Depends(editor_gate)],
)
def create_note(
    payload: NoteIn,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    return NoteRepo(session).save(NoteORM(contact_id=contact.id, **payload.model_dump()))


@router.get("/{contact_id}/notes/{note_id}", response_model=NoteOut)
def get_note(
    note_id: int,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    return _load_note(session, contact, note_id)


@router.put(
    "/{contact_id}/notes/{note_id}",
    response_model=NoteOut,
    dependencies=[Depends(editor_gate)],
)
def update_note(
    note_id: int,
    payload: NoteIn,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    note = _load_note(session, contact, note_id)
    note.title = payload.title
    note.body = payload.body
    return NoteRepo(session).save(note)


@router.delete(
    "/{contact_id}/notes/{note_id}",
    status_code=HTTP_NO_CONTENT,
    dependencies=[Depends(editor_gate)],
)
def delete_note(
    note_id: int,
    contact: ContactORM = Depends(get_contact),
    session: Session = Depends(get_session),
):
    NoteRepo(session).delete(_load_note(session, contact, note_id))
