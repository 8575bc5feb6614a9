"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Fournir la session SQL de la requête, le conteneur applicatif et le principal authentifié.
- Porter la garde de permission des coffres (`require_vault_permission`), empilable : la garde
  du routeur impose le niveau le plus faible, les gardes de route les niveaux plus stricts.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from contactvault.apigw.errors import unauthorized
from contactvault.app.metrics import VAULT_GATE_DENIALS
from contactvault.core.container import Container
from contactvault.domain.auth import Principal, decode_token
from contactvault.domain.errors import NotFoundError
from contactvault.domain.permissions import (
    TwoFactorPending,
    VaultAccessError,
    VaultPermission,
    check_vault_access,
)
from contactvault.infra.repo.db import session_scope
from contactvault.infra.repo.models import ContactORM
from contactvault.infra.repositories import ContactRepo, UserRepo, VaultRepo

log = structlog.get_logger(__name__)


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_session(request: Request) -> Iterator[Session]:
    """Session SQL de la requête ; commit en fin de requête, rollback sur erreur."""
    with session_scope(get_container(request).session_factory) as session:
        yield session


def get_current_principal(
    authorization: str | None = Header(None),
    container: Container = Depends(get_container),
    session: Session = Depends(get_session),
) -> Principal:
    """Extrait et valide le principal à partir du token d'autorisation."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise unauthorized("missing_token")
    token = authorization.split(" ", 1)[1]
    data = decode_token(token, container.settings.JWT_SECRET, container.settings.JWT_ALG)
    if not data:
        raise unauthorized("invalid_token")
    if UserRepo(session).get(data.sub) is None:
        raise unauthorized("user_not_found")
    return Principal(
        user_id=data.sub, email=str(data.email), two_factor_pending=data.two_factor_pending
    )


def require_full_auth(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Principal pleinement authentifié (2FA validée)."""
    if principal.two_factor_pending:
        VAULT_GATE_DENIALS.labels(TwoFactorPending.code).inc()
        raise TwoFactorPending()
    return principal


def vault_id_from(request: Request) -> str | None:
    """Identifiant du coffre : paramètre `vault_id`, sinon `id` sur les routes de coffre."""
    params = request.path_params
    return params.get("vault_id") or params.get("id")


def require_vault_permission(required: VaultPermission):
    """Construit une garde exigeant au moins `required` sur le coffre de la route."""

    def vault_gate(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        session: Session = Depends(get_session),
    ) -> VaultPermission:
        vault_id = vault_id_from(request)
        actual = None
        if not principal.two_factor_pending:
            actual = VaultRepo(session).get_permission(principal.user_id, vault_id)
        try:
            level = check_vault_access(
                actual, required, two_factor_pending=principal.two_factor_pending
            )
        except VaultAccessError as err:
            VAULT_GATE_DENIALS.labels(err.code).inc()
            log.info(
                "vault_gate_denied",
                reason=err.code,
                user_id=principal.user_id,
                vault_id=vault_id,
                required=required.name.lower(),
            )
            raise
        request.state.vault_id = vault_id
        request.state.vault_permission = level
        return level

    vault_gate.__name__ = f"vault_gate_{required.name.lower()}"
    return vault_gate


viewer_gate = require_vault_permission(VaultPermission.VIEWER)
editor_gate = require_vault_permission(VaultPermission.EDITOR)
manager_gate = require_vault_permission(VaultPermission.MANAGER)


def get_contact(
    vault_id: str, contact_id: str, session: Session = Depends(get_session)
) -> ContactORM:
    """Contact du chemin, seulement s'il appartient au coffre du chemin."""
    contact = ContactRepo(session).get(vault_id, contact_id)
    if contact is None:
        raise NotFoundError("contact", contact_id)
    return contact
