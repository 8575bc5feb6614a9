"""Routes du moteur de calendrier et vue calendrier d'un coffre.

- `/calendar/*` : types supportés, conversions, prochaine occurrence (utilisateur authentifié).
- `/vaults/{vault_id}/calendar` : dates importantes et rappels du coffre pour un mois donné, avec
  les vues `years/{year}/months/{month}` et `.../days/{day}`.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from contactvault.api.deps import get_container, get_session, require_full_auth, viewer_gate
from contactvault.api.schemas import (
    CalendarTypesOut,
    ConvertRequest,
    ConvertResponse,
    ImportantDateOut,
    NextOccurrenceRequest,
    NextOccurrenceResponse,
    ReminderOut,
    VaultCalendarOut,
)
from contactvault.core.container import Container
from contactvault.domain.calendar.types import GREGORIAN
from contactvault.infra.repo.models import utcnow
from contactvault.infra.repositories import ImportantDateRepo, ReminderRepo

router = APIRouter(prefix="/calendar", tags=["calendar"], dependencies=[Depends(require_full_auth)])


@router.get("/types", response_model=CalendarTypesOut)
def calendar_types(container: Container = Depends(get_container)):
    return CalendarTypesOut(types=sorted(container.calendars.supported_types()))


@router.post("/convert", response_model=ConvertResponse)
def convert(payload: ConvertRequest, container: Container = Depends(get_container)):
    """Convertit une date vers ou depuis le grégorien.

    Le mois d'une date lunaire est négatif pour un mois intercalaire.
    """
    resolver = container.resolver
    if payload.direction == "to_gregorian":
        g = resolver.to_gregorian(payload.day, payload.month, payload.year, payload.calendar_type)
        return ConvertResponse(calendar_type=GREGORIAN, day=g.day, month=g.month, year=g.year)
    info = resolver.from_gregorian(payload.year, payload.month, payload.day, payload.calendar_type)
    return ConvertResponse(
        calendar_type=payload.calendar_type,
        day=info.day,
        month=info.month,
        year=info.year,
        is_leap_month=info.is_leap_month,
    )


@router.post("/next-occurrence", response_model=NextOccurrenceResponse)
def next_occurrence(payload: NextOccurrenceRequest, container: Container = Depends(get_container)):
    """Prochaine date grégorienne, strictement après `after` (défaut : maintenant)."""
    g = container.resolver.next_occurrence(
        payload.original_day,
        payload.original_month,
        payload.original_year,
        payload.calendar_type,
        payload.after or utcnow(),
    )
    return NextOccurrenceResponse(
        calendar_type=payload.calendar_type,
        date=g.isoformat(),
        day=g.day,
        month=g.month,
        year=g.year,
    )


vault_calendar_router = APIRouter(tags=["calendar"])


def _vault_calendar(
    session: Session,
    vault_id: str,
    month: int | None,
    year: int | None,
    day: int | None = None,
) -> VaultCalendarOut:
    dates = ImportantDateRepo(session).list_for_vault(vault_id, month=month, year=year, day=day)
    reminders = ReminderRepo(session).list_for_vault(vault_id, month=month, day=day)
    return VaultCalendarOut(
        month=month,
        year=year,
        day=day,
        important_dates=[ImportantDateOut.model_validate(d) for d in dates],
        reminders=[ReminderOut.model_validate(r) for r in reminders],
    )


@vault_calendar_router.get(
    "/vaults/{vault_id}/calendar",
    response_model=VaultCalendarOut,
    dependencies=[Depends(viewer_gate)],
)
def vault_calendar(
    vault_id: str,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None),
    session: Session = Depends(get_session),
):
    """Dates importantes (mois, et année si donnée) et rappels (mois) du coffre."""
    return _vault_calendar(session, vault_id, month, year)


@vault_calendar_router.get(
    "/vaults/{vault_id}/calendar/years/{year}/months/{month}",
    response_model=VaultCalendarOut,
    dependencies=[Depends(viewer_gate)],
)
def vault_calendar_month(
    vault_id: str,
    year: int,
    month: int = Path(ge=1, le=12),
    session: Session = Depends(get_session),
):
    return _vault_calendar(session, vault_id, month, year)


@vault_calendar_router.get(
    "/vaults/{vault_id}/calendar/years/{year}/months/{month}/days/{day}",
    response_model=VaultCalendarOut,
    dependencies=[Depends(viewer_gate)],
)
def vault_calendar_day(
    vault_id: str,
    year: int,
    month: int = Path(ge=1, le=12),
    day: int = Path(ge=1, le=31),
    session: Session = Depends(get_session),
):
    """Vue du mois restreinte au jour grégorien `day`."""
    return _vault_calendar(session, vault_id, month, year, day)
