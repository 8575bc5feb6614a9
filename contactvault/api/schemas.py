# Schémas Pydantic exposés par l'API (requêtes et réponses).

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

ReminderType = Literal[
    "one_time", "recurring", "recurring_week", "recurring_month", "recurring_year"
]
PermissionName = Literal["manager", "editor", "viewer"]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Authentification


class SignupPayload(BaseModel):
    """Payload pour l'inscription d'un nouvel utilisateur."""

    email: EmailStr
    password: str = Field(min_length=1)
    two_factor_enabled: bool = False


class LoginPayload(BaseModel):
    """Payload pour la connexion d'un utilisateur."""

    email: EmailStr
    password: str


class UserOut(ORMModel):
    id: str
    email: str
    two_factor_enabled: bool


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    two_factor_pending: bool = False


# Coffres et permissions


class VaultIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class VaultOut(ORMModel):
    """Coffre, avec la permission de l'appelant quand elle est connue.

    Champs:
    - permission: 100 (manager), 200 (editor) ou 300 (viewer)
    """

    id: str
    name: str
    description: str | None = None
    created_at: datetime
    permission: int | None = None


class GrantIn(BaseModel):
    """Accorde un niveau d'accès à un utilisateur identifié par son email."""

    email: EmailStr
    permission: PermissionName


class GrantUpdate(BaseModel):
    permission: PermissionName


class GrantOut(BaseModel):
    user_id: str
    email: str
    permission: int
    role: PermissionName


# Contacts et notes


class ContactIn(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None


class ContactOut(ORMModel):
    id: str
    vault_id: str
    first_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None
    created_at: datetime


class NoteIn(BaseModel):
    title: str | None = None
    body: str = Field(min_length=1)


class NoteOut(ORMModel):
    id: int
    contact_id: str
    title: str | None = None
    body: str
    created_at: datetime


# Dates de calendrier (dates importantes, rappels)


class CalendarFieldsIn(BaseModel):
    """Colonnes de calendrier saisies par le client.

    Champs:
    - day/month/year: date grégorienne (utilisée telle quelle en grégorien)
    - calendar_type: système de la date d'origine ("gregorian", "lunar", ...)
    - original_month: mois dans ce système ; négatif pour un mois intercalaire
    """

    day: int | None = Field(default=None, ge=1, le=31)
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = None
    calendar_type: str = "gregorian"
    original_day: int | None = None
    original_month: int | None = None
    original_year: int | None = None


class CalendarFieldsOut(ORMModel):
    day: int | None = None
    month: int | None = None
    year: int | None = None
    calendar_type: str
    original_day: int | None = None
    original_month: int | None = None
    original_year: int | None = None


class ImportantDateIn(CalendarFieldsIn):
    label: str = Field(min_length=1, max_length=255)


class ImportantDateOut(CalendarFieldsOut):
    id: int
    contact_id: str
    label: str


class ReminderIn(CalendarFieldsIn):
    label: str = Field(min_length=1, max_length=255)
    type: ReminderType
    frequency_number: int | None = Field(default=None, ge=1)


class ReminderOut(CalendarFieldsOut):
    id: int
    contact_id: str
    label: str
    type: str
    frequency_number: int | None = None
    last_triggered_at: datetime | None = None
    number_times_triggered: int = 0


class VaultReminderOut(ReminderOut):
    """Rappel listé au niveau du coffre, avec le nom de son contact."""

    contact_first_name: str = ""
    contact_last_name: str = ""


class ScheduleOut(ORMModel):
    id: int
    scheduled_at: datetime
    triggered_at: datetime | None = None


class NextReminderOut(BaseModel):
    reminder_id: int
    scheduled_at: datetime | None = None


class VaultCalendarOut(BaseModel):
    """Vue calendrier d'un coffre pour un mois (et une année) donnés."""

    month: int | None = None
    year: int | None = None
    day: int | None = None
    important_dates: list[ImportantDateOut]
    reminders: list[ReminderOut]


# Moteur de calendrier


class CalendarTypesOut(BaseModel):
    types: list[str]


class ConvertRequest(BaseModel):
    """Conversion d'une date entre grégorien et un autre calendrier.

    Champs:
    - direction: "to_gregorian" (day/month/year dans `calendar_type`) ou "from_gregorian"
    - month: négatif pour un mois intercalaire (sens to_gregorian)
    """

    calendar_type: str
    direction: Literal["to_gregorian", "from_gregorian"] = "to_gregorian"
    day: int
    month: int
    year: int


class ConvertResponse(BaseModel):
    calendar_type: str
    day: int
    month: int
    year: int
    is_leap_month: bool = False


class NextOccurrenceRequest(BaseModel):
    calendar_type: str
    original_day: int
    original_month: int
    original_year: int | None = None
    after: datetime | None = None


class NextOccurrenceResponse(BaseModel):
    calendar_type: str
    date: str
    day: int
    month: int
    year: int
