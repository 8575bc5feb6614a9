"""SQLAlchemy models for the persistence layer (users, vaults, contacts, reminders)."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Horodatage UTC naïf, format stocké en base."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class UserORM(Base):
    """Compte utilisateur."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    two_factor_enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class VaultORM(Base):
    """Coffre : frontière de tenant regroupant des contacts."""

    __tablename__ = "vaults"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    grants = relationship("UserVaultORM", cascade="all, delete-orphan", passive_deletes=True)
    contacts = relationship("ContactORM", cascade="all, delete-orphan", passive_deletes=True)


class UserVaultORM(Base):
    """Permission d'un utilisateur sur un coffre (100 manager, 200 editor, 300 viewer)."""

    __tablename__ = "user_vault"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vault_id = Column(String(36), ForeignKey("vaults.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    permission = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("vault_id", "user_id", name="uq_user_vault"),
        CheckConstraint("permission IN (100, 200, 300)", name="ck_user_vault_permission"),
    )


class ContactORM(Base):
    """Contact rattaché à un coffre."""

    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=_uuid)
    vault_id = Column(
        String(36), ForeignKey("vaults.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    nickname = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    notes = relationship("NoteORM", cascade="all, delete-orphan", passive_deletes=True)
    reminders = relationship("ReminderORM", cascade="all, delete-orphan", passive_deletes=True)
    important_dates = relationship(
        "ImportantDateORM", cascade="all, delete-orphan", passive_deletes=True
    )


class NoteORM(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(
        String(36), ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=True)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class CalendarColumnsMixin:
    """Colonnes de date partagées par les dates importantes et les rappels.

    `day/month/year` portent la date grégorienne calculée ; `original_*` la date saisie dans
    `calendar_type` (mois négatif = mois intercalaire).
    """

    day = Column(Integer, nullable=True)
    month = Column(Integer, nullable=True)
    year = Column(Integer, nullable=True)
    calendar_type = Column(String(32), nullable=False, default="gregorian")
    original_day = Column(Integer, nullable=True)
    original_month = Column(Integer, nullable=True)
    original_year = Column(Integer, nullable=True)


class ImportantDateORM(CalendarColumnsMixin, Base):
    __tablename__ = "contact_important_dates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(
        String(36), ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class ReminderORM(CalendarColumnsMixin, Base):
    __tablename__ = "contact_reminders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(
        String(36), ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label = Column(String(255), nullable=False)
    type = Column(String(32), nullable=False)
    frequency_number = Column(Integer, nullable=True)
    last_triggered_at = Column(DateTime, nullable=True)
    number_times_triggered = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    contact = relationship("ContactORM", viewonly=True)
    schedules = relationship(
        "ReminderScheduleORM", cascade="all, delete-orphan", passive_deletes=True
    )


class ReminderScheduleORM(Base):
    """Occurrence planifiée d'un rappel ; `triggered_at` est posé au déclenchement."""

    __tablename__ = "contact_reminder_scheduled"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_reminder_id = Column(
        Integer,
        ForeignKey("contact_reminders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scheduled_at = Column(DateTime, nullable=False, index=True)
    triggered_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    reminder = relationship("ReminderORM", viewonly=True)
