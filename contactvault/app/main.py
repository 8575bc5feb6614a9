"""
Application principale FastAPI.

Ce module assemble tous les composants du service de coffres de contacts : middlewares,
gestionnaires d'erreurs, routes et métriques.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI autour d'un `Container` (réglages, base, moteur de calendrier)
- Ajouter les middlewares (request id, métriques, timing)
- Monter les routers (santé, auth, coffres, contacts, rappels, calendrier)
"""

from __future__ import annotations

from fastapi import FastAPI

from contactvault.api.routes_auth import router as auth_router
from contactvault.api.routes_calendar import router as calendar_router
from contactvault.api.routes_calendar import vault_calendar_router
from contactvault.api.routes_contacts import router as contacts_router
from contactvault.api.routes_health import router as health_router
from contactvault.api.routes_important_dates import router as important_dates_router
from contactvault.api.routes_reminders import router as reminders_router
from contactvault.api.routes_reminders import vault_reminders_router
from contactvault.api.routes_vaults import router as vaults_router
from contactvault.api.routes_vaults import users_router as vault_users_router
from contactvault.apigw.errors import install_error_handlers
from contactvault.app.metrics import PrometheusMiddleware, metrics_router
from contactvault.core.container import Container, container as default_container
from contactvault.core.logging import setup_logging
from contactvault.middlewares.request_id import RequestIDMiddleware
from contactvault.middlewares.timing import TimingMiddleware


def create_app(container: Container | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Attache le conteneur à `app.state` (crée les tables si `DB_AUTO_CREATE`)
    - Ajoute les middlewares utiles au debug/traçabilité
    - Installe les gestionnaires d'erreurs et publie les routes
    """
    container = container or default_container
    settings = container.settings
    setup_logging(settings.LOG_LEVEL)
    if settings.DB_AUTO_CREATE:
        container.init_db()
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.state.container = container
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(TimingMiddleware, slow_ms=settings.SLOW_REQUEST_MS)
    install_error_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(auth_router)
    app.include_router(vaults_router)
    app.include_router(vault_users_router)
    app.include_router(contacts_router)
    app.include_router(important_dates_router)
    app.include_router(reminders_router)
    app.include_router(vault_reminders_router)
    app.include_router(calendar_router)
    app.include_router(vault_calendar_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = default_container.settings
    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
