"""
Endpoint de santé pour vérifier la disponibilité de l'API et de la base.

Expose `/health` pour signaler l'état général de l'application et du stockage.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text

from contactvault.api.deps import get_container
from contactvault.core.container import Container

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container: Container = Depends(get_container)):
    """Vérifie la disponibilité de l'API, de la base et du registre de calendriers."""
    with container.engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "database": container.engine.dialect.name,
        "calendars": sorted(container.calendars.supported_types()),
    }
