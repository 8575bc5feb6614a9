"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, moteur SQL, registre des calendriers, résolveur de
récurrences, planificateur de rappels) et expose un singleton `container` utilisé par l'application
et les tâches Celery. Les tests construisent leur propre `Container`.
"""

from contactvault.core.settings import Settings, get_settings
from contactvault.domain.calendar.registry import CalendarRegistry, build_default_registry
from contactvault.domain.calendar.resolver import RecurrenceResolver
from contactvault.domain.reminder_scheduler import ReminderScheduler
from contactvault.infra.repo.db import get_engine, get_session_factory
from contactvault.infra.repo.models import Base


class Container:
    def __init__(
        self, settings: Settings | None = None, registry: CalendarRegistry | None = None
    ):
        self.settings = settings or get_settings()
        self.engine = get_engine(self.settings.DATABASE_URL)
        self.session_factory = get_session_factory(self.engine)
        # Registre construit une seule fois, figé avant toute lecture
        self.calendars = registry or build_default_registry()
        self.resolver = RecurrenceResolver(self.calendars)
        self.scheduler = ReminderScheduler(
            self.resolver, reminder_hour=self.settings.REMINDER_HOUR
        )

    def init_db(self) -> None:
        """Crée les tables manquantes (dev/tests ; Alembic en production)."""
        Base.metadata.create_all(self.engine)


container = Container()
