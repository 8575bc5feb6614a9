# mypy: ignore-errors
"""
Migration Alembic initiale du service de coffres.

Crée les utilisateurs, les coffres et leurs permissions, les contacts, notes, dates importantes,
rappels et occurrences planifiées.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def _calendar_columns() -> list[sa.Column]:
    return [
        sa.Column("day", sa.Integer(), nullable=True),
        sa.Column("month", sa.Integer(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("calendar_type", sa.String(length=32), nullable=False, server_default="gregorian"),
        sa.Column("original_day", sa.Integer(), nullable=True),
        sa.Column("original_month", sa.Integer(), nullable=True),
        sa.Column("original_year", sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    """Crée le schéma complet."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("two_factor_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "vaults",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "user_vault",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "vault_id",
            sa.String(length=36),
            sa.ForeignKey("vaults.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("permission", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("vault_id", "user_id", name="uq_user_vault"),
        sa.CheckConstraint("permission IN (100, 200, 300)", name="ck_user_vault_permission"),
    )
    op.create_table(
        "contacts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "vault_id",
            sa.String(length=36),
            sa.ForeignKey("vaults.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column("nickname", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_contacts_vault_id", "contacts", ["vault_id"])
    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "contact_id",
            sa.String(length=36),
            sa.ForeignKey("contacts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_notes_contact_id", "notes", ["contact_id"])
    op.create_table(
        "contact_important_dates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "contact_id",
            sa.String(length=36),
            sa.ForeignKey("contacts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("label", sa.String(length=255), nullable=False),
        *_calendar_columns(),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_contact_important_dates_contact_id", "contact_important_dates", ["contact_id"]
    )
    op.create_table(
        "contact_reminders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "contact_id",
            sa.String(length=36),
            sa.ForeignKey("contacts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("frequency_number", sa.Integer(), nullable=True),
        *_calendar_columns(),
        sa.Column("last_triggered_at", sa.DateTime(), nullable=True),
        sa.Column("number_times_triggered", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_contact_reminders_contact_id", "contact_reminders", ["contact_id"])
    op.create_table(
        "contact_reminder_scheduled",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "contact_reminder_id",
            sa.Integer(),
            sa.ForeignKey("contact_reminders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("scheduled_at", sa.DateTime(), nullable=False),
        sa.Column("triggered_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_contact_reminder_scheduled_contact_reminder_id",
        "contact_reminder_scheduled",
        ["contact_reminder_id"],
    )
    op.create_index(
        "ix_contact_reminder_scheduled_scheduled_at",
        "contact_reminder_scheduled",
        ["scheduled_at"],
    )


def downgrade() -> None:
    """Supprime le schéma, dans l'ordre inverse des dépendances."""
    for table in (
        "contact_reminder_scheduled",
        "contact_reminders",
        "contact_important_dates",
        "notes",
        "contacts",
        "user_vault",
        "vaults",
        "users",
    ):
        op.drop_table(table)
