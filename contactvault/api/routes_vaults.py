"""Routes des coffres (vaults) et de leurs permissions.

Objectif du module
------------------
- CRUD des coffres : la création fait du créateur un Manager du coffre.
- Administration des accès (`/vaults/{vault_id}/users`) : lecture dès Viewer, écriture Manager.
- Un coffre garde toujours au moins un Manager.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contactvault.api.deps import (
    editor_gate,
    get_session,
    manager_gate,
    require_full_auth,
    viewer_gate,
)
from contactvault.api.schemas import GrantIn, GrantOut, GrantUpdate, VaultIn, VaultOut
from contactvault.core.http_constants import HTTP_CREATED, HTTP_NO_CONTENT
from contactvault.domain.auth import Principal
from contactvault.domain.errors import ConflictError, NotFoundError
from contactvault.domain.permissions import VaultPermission
from contactvault.infra.repo.models import UserVaultORM, VaultORM
from contactvault.infra.repositories import UserRepo, VaultRepo

router = APIRouter(prefix="/vaults", tags=["vaults"])
log = structlog.get_logger(__name__)


def _vault_out(vault: VaultORM, permission: int | None) -> VaultOut:
    return VaultOut(
        id=vault.id,
        name=vault.name,
        description=vault.description,
        created_at=vault.created_at,
        permission=permission,
    )


def _grant_out(grant: UserVaultORM, email: str) -> GrantOut:
    return GrantOut(
        user_id=grant.user_id,
        email=email,
        permission=grant.permission,
        role=VaultPermission(grant.permission).name.lower(),
    )


def _load_vault(session: Session, vault_id: str) -> VaultORM:
    vault = VaultRepo(session).get(vault_id)
    if vault is None:
        raise NotFoundError("vault", vault_id)
    return vault


@router.get("", response_model=list[VaultOut])
def list_vaults(
    principal: Principal = Depends(require_full_auth), session: Session = Depends(get_session)
):
    """Coffres accessibles à l'utilisateur, avec sa permission sur chacun."""
    rows = VaultRepo(session).list_for_user(principal.user_id)
    return [_vault_out(vault, permission) for vault, permission in rows]


@router.post("", response_model=VaultOut, status_code=HTTP_CREATED)
def create_vault(
    payload: VaultIn,
    principal: Principal = Depends(require_full_auth),
    session: Session = Depends(get_session),
):
    """Crée un coffre dont l'appelant devient Manager."""
    vault = VaultRepo(session).create(
        VaultORM(name=payload.name, description=payload.description),
        owner_id=principal.user_id,
        permission=VaultPermission.MANAGER,
    )
    log.info("vault_created", vault_id=vault.id, user_id=principal.user_id)
    return _vault_out(vault, VaultPermission.MANAGER)


@router.get("/{id}", response_model=VaultOut)
def get_vault(
    id: str,
    level: VaultPermission = Depends(viewer_gate),
    session: Session = Depends(get_session),
):
    return _vault_out(_load_vault(session, id), level)


@router.put("/{id}", response_model=VaultOut)
def update_vault(
    id: str,
    payload: VaultIn,
    level: VaultPermission = Depends(editor_gate),
    session: Session = Depends(get_session),
):
    vault = _load_vault(session, id)
    vault.name = payload.name
    vault.description = payload.description
    session.flush()
    return _vault_out(vault, level)


@router.delete("/{id}", status_code=HTTP_NO_CONTENT, dependencies=[Depends(manager_gate)])
def delete_vault(id: str, session: Session = Depends(get_session)):
    """Supprime le coffre et tout son contenu (contacts, rappels, accès)."""
    VaultRepo(session).delete(_load_vault(session, id))
    log.info("vault_deleted", vault_id=id)


# Accès au coffre

users_router = APIRouter(
    prefix="/vaults/{vault_id}/users",
    tags=["vaults"],
    dependencies=[Depends(viewer_gate)],
)


def _ensure_manager_remains(repo: VaultRepo, vault_id: str, grant: UserVaultORM) -> None:
    """Refuse de retirer ou rétrograder le dernier Manager du coffre."""
    if grant.permission != VaultPermission.MANAGER:
        return
    managers = [
        g for g, _ in repo.list_grants(vault_id) if g.permission == VaultPermission.MANAGER
    ]
    if len(managers) <= 1:
        raise ConflictError("last_manager", "a vault must keep at least one manager")


@users_router.get("", response_model=list[GrantOut])
def list_grants(vault_id: str, session: Session = Depends(get_session)):
    return [_grant_out(grant, user.email) for grant, user in VaultRepo(session).list_grants(vault_id)]


@users_router.post(
    "", response_model=GrantOut, status_code=HTTP_CREATED, dependencies=[Depends(manager_gate)]
)
def add_grant(vault_id: str, payload: GrantIn, session: Session = Depends(get_session)):
    """Donne accès au coffre à un utilisateur existant."""
    user = UserRepo(session).get_by_email(str(payload.email))
    if user is None:
        raise NotFoundError("user", str(payload.email))
    repo = VaultRepo(session)
    if repo.get_grant(vault_id, user.id) is not None:
        raise ConflictError("grant_exists", "user already has access to this vault")
    grant = repo.set_permission(vault_id, user.id, VaultPermission[payload.permission.upper()])
    log.info("vault_access_granted", vault_id=vault_id, user_id=user.id, permission=grant.permission)
    return _grant_out(grant, user.email)


@users_router.put("/{user_id}", response_model=GrantOut, dependencies=[Depends(manager_gate)])
def update_grant(
    vault_id: str, user_id: str, payload: GrantUpdate, session: Session = Depends(get_session)
):
    repo = VaultRepo(session)
    grant = repo.get_grant(vault_id, user_id)
    if grant is None:
        raise NotFoundError("grant", user_id)
    permission = VaultPermission[payload.permission.upper()]
    if permission != VaultPermission.MANAGER:
        _ensure_manager_remains(repo, vault_id, grant)
    grant = repo.set_permission(vault_id, user_id, permission)
    return _grant_out(grant, UserRepo(session).get(user_id).email)


@users_router.delete(
    "/{user_id}", status_code=HTTP_NO_CONTENT, dependencies=[Depends(manager_gate)]
)
def remove_grant(vault_id: str, user_id: str, session: Session = Depends(get_session)):
    repo = VaultRepo(session)
    grant = repo.get_grant(vault_id, user_id)
    if grant is None:
        raise NotFoundError("grant", user_id)
    _ensure_manager_remains(repo, vault_id, grant)
    repo.remove_grant(grant)
    log.info("vault_access_revoked", vault_id=vault_id, user_id=user_id)
