"""
Métriques Prometheus pour l'application.

Ce module définit les métriques Prometheus utilisées pour le monitoring du service de coffres
(requêtes HTTP, garde de permission, moteur de récurrence, rappels).
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Garde de permission des coffres
VAULT_GATE_DENIALS = Counter(
    "vault_gate_denials_total",
    "Requests rejected by the vault permission gate",
    ["reason"],
)

# Moteur de récurrence
RECURRENCE_RESOLUTIONS = Counter(
    "recurrence_resolutions_total",
    "Next-occurrence resolutions by calendar and outcome",
    ["calendar_type", "outcome"],
)

# Rappels
REMINDERS_TRIGGERED = Counter(
    "reminders_triggered_total",
    "Reminder occurrences triggered by the scheduler",
    ["type"],
)


def route_label(request: Request) -> str:
    """Gabarit de route (`/vaults/{vault_id}/...`) pour borner la cardinalité des labels."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = route_label(request)
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
