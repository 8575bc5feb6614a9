"""
Repositories SQLAlchemy pour les données du coffre.

Chaque dépôt est construit avec une `Session` ouverte par la requête (ou par la tâche) et ne fait
jamais de commit lui-même : la transaction appartient à l'appelant.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from contactvault.infra.repo.models import (
    ContactORM,
    ImportantDateORM,
    NoteORM,
    ReminderORM,
    ReminderScheduleORM,
    UserORM,
    UserVaultORM,
    VaultORM,
)


class UserRepo:
    """Dépôt utilisateurs."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> UserORM | None:
        return self._session.get(UserORM, user_id)

    def get_by_email(self, email: str) -> UserORM | None:
        """Recherche un utilisateur par email."""
        stmt = select(UserORM).where(UserORM.email == email)
        return self._session.execute(stmt).scalars().first()

    def save(self, user: UserORM) -> UserORM:
        self._session.add(user)
        self._session.flush()
        return user


class VaultRepo:
    """Coffres et lignes de permission `user_vault`."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_permission(self, user_id: str, vault_id: str) -> int | None:
        """Lit la permission persistée pour (utilisateur, coffre) ; None si aucune ligne."""
        stmt = select(UserVaultORM.permission).where(
            UserVaultORM.user_id == user_id, UserVaultORM.vault_id == vault_id
        )
        return self._session.execute(stmt).scalars().first()

    def get(self, vault_id: str) -> VaultORM | None:
        return self._session.get(VaultORM, vault_id)

    def create(self, vault: VaultORM, owner_id: str, permission: int) -> VaultORM:
        """Crée le coffre et accorde `permission` à son créateur."""
        self._session.add(vault)
        self._session.flush()
        self.set_permission(vault.id, owner_id, permission)
        return vault

    def list_for_user(self, user_id: str) -> list[tuple[VaultORM, int]]:
        stmt = (
            select(VaultORM, UserVaultORM.permission)
            .join(UserVaultORM, UserVaultORM.vault_id == VaultORM.id)
            .where(UserVaultORM.user_id == user_id)
            .order_by(VaultORM.created_at)
        )
        return [(row[0], row[1]) for row in self._session.execute(stmt).all()]

    def delete(self, vault: VaultORM) -> None:
        self._session.delete(vault)
        self._session.flush()

    def list_grants(self, vault_id: str) -> list[tuple[UserVaultORM, UserORM]]:
        stmt = (
            select(UserVaultORM, UserORM)
            .join(UserORM, UserORM.id == UserVaultORM.user_id)
            .where(UserVaultORM.vault_id == vault_id)
            .order_by(UserVaultORM.permission, UserORM.email)
        )
        return [(row[0], row[1]) for row in self._session.execute(stmt).all()]

    def get_grant(self, vault_id: str, user_id: str) -> UserVaultORM | None:
        stmt = select(UserVaultORM).where(
            UserVaultORM.vault_id == vault_id, UserVaultORM.user_id == user_id
        )
        return self._session.execute(stmt).scalars().first()

    def set_permission(self, vault_id: str, user_id: str, permission: int) -> UserVaultORM:
        """Crée ou met à jour la ligne de permission."""
        grant = self.get_grant(vault_id, user_id)
        if grant is None:
            grant = UserVaultORM(vault_id=vault_id, user_id=user_id, permission=permission)
            self._session.add(grant)
        else:
            grant.permission = permission
        self._session.flush()
        return grant

    def remove_grant(self, grant: UserVaultORM) -> None:
        self._session.delete(grant)
        self._session.flush()


class ContactRepo:
    """Contacts, toujours lus dans le périmètre d'un coffre."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list(self, vault_id: str) -> list[ContactORM]:
        stmt = (
            select(ContactORM)
            .where(ContactORM.vault_id == vault_id)
            .order_by(ContactORM.last_name, ContactORM.first_name)
        )
        return list(self._session.execute(stmt).scalars().all())

    def get(self, vault_id: str, contact_id: str) -> ContactORM | None:
        """Retourne le contact seulement s'il appartient à `vault_id`."""
        stmt = select(ContactORM).where(
            ContactORM.id == contact_id, ContactORM.vault_id == vault_id
        )
        return self._session.execute(stmt).scalars().first()

    def save(self, contact: ContactORM) -> ContactORM:
        self._session.add(contact)
        self._session.flush()
        return contact

    def delete(self, contact: ContactORM) -> None:
        self._session.delete(contact)
        self._session.flush()


class NoteRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list(self, contact_id: str) -> list[NoteORM]:
        stmt = (
            select(NoteORM)
            .where(NoteORM.contact_id == contact_id)
            .order_by(NoteORM.created_at.desc(), NoteORM.id.desc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def get(self, contact_id: str, note_id: int) -> NoteORM | None:
        stmt = select(NoteORM).where(NoteORM.id == note_id, NoteORM.contact_id == contact_id)
        return self._session.execute(stmt).scalars().first()

    def save(self, note: NoteORM) -> NoteORM:
        self._session.add(note)
        self._session.flush()
        return note

    def delete(self, note: NoteORM) -> None:
        self._session.delete(note)
        self._session.flush()


class ImportantDateRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list(self, contact_id: str) -> list[ImportantDateORM]:
        stmt = (
            select(ImportantDateORM)
            .where(ImportantDateORM.contact_id == contact_id)
            .order_by(ImportantDateORM.created_at.desc(), ImportantDateORM.id.desc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def get(self, contact_id: str, date_id: int) -> ImportantDateORM | None:
        stmt = select(ImportantDateORM).where(
            ImportantDateORM.id == date_id, ImportantDateORM.contact_id == contact_id
        )
        return self._session.execute(stmt).scalars().first()

    def save(self, date: ImportantDateORM) -> ImportantDateORM:
        self._session.add(date)
        self._session.flush()
        return date

    def delete(self, date: ImportantDateORM) -> None:
        self._session.delete(date)
        self._session.flush()

    def list_for_vault(
        self,
        vault_id: str,
        month: int | None = None,
        year: int | None = None,
        day: int | None = None,
    ) -> list[ImportantDateORM]:
        """Dates du coffre ; les dates sans année correspondent à toute année demandée."""
        stmt = (
            select(ImportantDateORM)
            .join(ContactORM, ContactORM.id == ImportantDateORM.contact_id)
            .where(ContactORM.vault_id == vault_id)
        )
        if month:
            stmt = stmt.where(ImportantDateORM.month == month)
        if year:
            stmt = stmt.where(
                or_(ImportantDateORM.year == year, ImportantDateORM.year.is_(None))
            )
        if day:
            stmt = stmt.where(ImportantDateORM.day == day)
        stmt = stmt.order_by(ImportantDateORM.month, ImportantDateORM.day, ImportantDateORM.id)
        return list(self._session.execute(stmt).scalars().all())


class ReminderRepo:
    """Rappels de contact et leurs occurrences planifiées."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list(self, contact_id: str) -> list[ReminderORM]:
        stmt = (
            select(ReminderORM)
            .where(ReminderORM.contact_id == contact_id)
            .order_by(ReminderORM.created_at.desc(), ReminderORM.id.desc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def get(self, contact_id: str, reminder_id: int) -> ReminderORM | None:
        stmt = select(ReminderORM).where(
            ReminderORM.id == reminder_id, ReminderORM.contact_id == contact_id
        )
        return self._session.execute(stmt).scalars().first()

    def save(self, reminder: ReminderORM) -> ReminderORM:
        self._session.add(reminder)
        self._session.flush()
        return reminder

    def delete(self, reminder: ReminderORM) -> None:
        """Supprime le rappel ; ses occurrences planifiées partent avec lui (cascade)."""
        self._session.delete(reminder)
        self._session.flush()

    def list_for_vault(
        self, vault_id: str, month: int | None = None, day: int | None = None
    ) -> list[ReminderORM]:
        stmt = (
            select(ReminderORM)
            .join(ContactORM, ContactORM.id == ReminderORM.contact_id)
            .where(ContactORM.vault_id == vault_id)
        )
        if month:
            stmt = stmt.where(ReminderORM.month == month)
        if day:
            stmt = stmt.where(ReminderORM.day == day)
        stmt = stmt.order_by(ReminderORM.month, ReminderORM.day, ReminderORM.id)
        return list(self._session.execute(stmt).scalars().all())

    def list_with_contacts(self, vault_id: str) -> list[tuple[ReminderORM, ContactORM]]:
        """Tous les rappels du coffre avec leur contact, du plus récent au plus ancien."""
        stmt = (
            select(ReminderORM, ContactORM)
            .join(ContactORM, ContactORM.id == ReminderORM.contact_id)
            .where(ContactORM.vault_id == vault_id)
            .order_by(ReminderORM.created_at.desc(), ReminderORM.id.desc())
        )
        return [(reminder, contact) for reminder, contact in self._session.execute(stmt).all()]

    # Occurrences planifiées

    def add_schedule(self, reminder_id: int, scheduled_at: datetime) -> ReminderScheduleORM:
        row = ReminderScheduleORM(contact_reminder_id=reminder_id, scheduled_at=scheduled_at)
        self._session.add(row)
        self._session.flush()
        return row

    def clear_pending(self, reminder_id: int) -> None:
        """Supprime les occurrences non encore déclenchées d'un rappel."""
        self._session.execute(
            delete(ReminderScheduleORM).where(
                ReminderScheduleORM.contact_reminder_id == reminder_id,
                ReminderScheduleORM.triggered_at.is_(None),
            )
        )

    def schedules(self, reminder_id: int) -> list[ReminderScheduleORM]:
        stmt = (
            select(ReminderScheduleORM)
            .where(ReminderScheduleORM.contact_reminder_id == reminder_id)
            .order_by(ReminderScheduleORM.scheduled_at)
        )
        return list(self._session.execute(stmt).scalars().all())

    def due_schedules(self, now: datetime) -> list[ReminderScheduleORM]:
        stmt = (
            select(ReminderScheduleORM)
            .where(
                ReminderScheduleORM.scheduled_at <= now,
                ReminderScheduleORM.triggered_at.is_(None),
            )
            .order_by(ReminderScheduleORM.scheduled_at, ReminderScheduleORM.id)
        )
        return list(self._session.execute(stmt).scalars().all())
