"""Middleware Starlette de mesure et de journalisation des requêtes.

Pose l'en-tête X-Process-Time-ms et journalise chaque requête avec son gabarit de route, son
statut, l'identifiant de requête et, pour les routes d'un coffre, le coffre autorisé par la porte
de permissions. Au-delà de `slow_ms`, la requête est journalisée en avertissement.
"""

import time
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from contactvault.core.http_constants import PROCESS_TIME_HEADER

log = structlog.get_logger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """Middleware pour mesurer et journaliser le temps de traitement des requêtes."""

    def __init__(
        self, app: ASGIApp, header_name: str = PROCESS_TIME_HEADER, slow_ms: int = 500
    ) -> None:
        super().__init__(app)
        self.header_name = header_name
        self.slow_ms = slow_ms

    async def dispatch(self, request, call_next: Callable):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers[self.header_name] = str(duration_ms)

        route = request.scope.get("route")
        slow = duration_ms >= self.slow_ms
        (log.warning if slow else log.debug)(
            "slow_request" if slow else "request_completed",
            method=request.method,
            route=getattr(route, "path", "unmatched"),
            status=response.status_code,
            duration_ms=duration_ms,
            request_id=getattr(request.state, "request_id", None),
            vault_id=getattr(request.state, "vault_id", None),
        )
        return response
