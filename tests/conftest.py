"""Configuration de test pour pytest avec gestion des chemins.

Ce module ajoute la racine du projet au sys.path, force une base SQLite en mémoire et fournit une
application construite autour d'un `Container` neuf pour chaque test.
"""

import os
import sys

import pytest

# Ensure project root is on sys.path so that
# imports like `from contactvault...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Le conteneur global (importé par l'app et Celery) ne doit jamais toucher au disque
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient  # noqa: E402

from contactvault.app.main import create_app  # noqa: E402
from contactvault.core.container import Container  # noqa: E402
from contactvault.core.http_constants import HTTP_CREATED, HTTP_OK  # noqa: E402
from contactvault.core.settings import get_settings  # noqa: E402


@pytest.fixture
def container():
    """Conteneur isolé : base en mémoire propre au test."""
    return Container(settings=get_settings(DATABASE_URL="sqlite+pysqlite:///:memory:"))


@pytest.fixture
def client(container):
    return TestClient(create_app(container))


@pytest.fixture
def login(client):
    """Inscrit un utilisateur puis retourne les en-têtes d'autorisation de son token."""

    def _login(email: str, password: str = "s3cret!", two_factor: bool = False) -> dict:
        r = client.post(
            "/auth/signup",
            json={"email": email, "password": password, "two_factor_enabled": two_factor},
        )
        assert r.status_code == HTTP_CREATED, r.text
        r = client.post("/auth/login", json={"email": email, "password": password})
        assert r.status_code == HTTP_OK, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login


@pytest.fixture
def vault_factory(client):
    """Crée un coffre au nom de `headers` et retourne son identifiant."""

    def _create(headers: dict, name: str = "Famille") -> str:
        r = client.post("/vaults", json={"name": name}, headers=headers)
        assert r.status_code == HTTP_CREATED, r.text
        return r.json()["id"]

    return _create


@pytest.fixture
def grant(client):
    """Accorde `permission` (manager/editor/viewer) sur un coffre à l'utilisateur `email`."""

    def _grant(manager_headers: dict, vault_id: str, email: str, permission: str) -> None:
        r = client.post(
            f"/vaults/{vault_id}/users",
            json={"email": email, "permission": permission},
            headers=manager_headers,
        )
        assert r.status_code == HTTP_CREATED, r.text

    return _grant
