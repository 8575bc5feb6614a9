"""
Routes d'authentification pour l'API.

Ce module fournit les endpoints d'inscription et de connexion. Un utilisateur dont la double
authentification est activée reçoit un token « en attente » qui ne franchit aucune garde de coffre.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contactvault.api.deps import get_container, get_current_principal, get_session
from contactvault.api.schemas import LoginPayload, SignupPayload, TokenOut, UserOut
from contactvault.apigw.errors import conflict, unauthorized
from contactvault.core.container import Container
from contactvault.core.http_constants import HTTP_CREATED
from contactvault.domain.auth import (
    Principal,
    create_access_token,
    hash_password,
    verify_password,
)
from contactvault.infra.repo.models import UserORM
from contactvault.infra.repositories import UserRepo

router = APIRouter(prefix="/auth", tags=["auth"])
log = structlog.get_logger(__name__)


@router.post("/signup", response_model=UserOut, status_code=HTTP_CREATED)
def signup(p: SignupPayload, session: Session = Depends(get_session)):
    """Inscrit un nouvel utilisateur dans le système."""
    repo = UserRepo(session)
    if repo.get_by_email(str(p.email)):
        raise conflict("email_exists")
    user = repo.save(
        UserORM(
            email=str(p.email),
            password_hash=hash_password(p.password),
            two_factor_enabled=p.two_factor_enabled,
        )
    )
    log.info("user_signed_up", user_id=user.id)
    return user


@router.post("/login", response_model=TokenOut)
def login(
    p: LoginPayload,
    session: Session = Depends(get_session),
    container: Container = Depends(get_container),
):
    """Authentifie un utilisateur et retourne un token d'accès."""
    user = UserRepo(session).get_by_email(str(p.email))
    if not user or not verify_password(p.password, user.password_hash):
        raise unauthorized("invalid_credentials")
    pending = bool(user.two_factor_enabled)
    payload = {"sub": user.id, "email": user.email}
    if pending:
        payload["two_factor_pending"] = True
    token = create_access_token(
        secret=container.settings.JWT_SECRET,
        alg=container.settings.JWT_ALG,
        expires_min=container.settings.JWT_EXPIRES_MIN,
        payload=payload,
    )
    return TokenOut(access_token=token, two_factor_pending=pending)


@router.get("/me")
def me(principal: Principal = Depends(get_current_principal)):
    """Retourne le principal associé au token courant."""
    return {
        "id": principal.user_id,
        "email": principal.email,
        "two_factor_pending": principal.two_factor_pending,
    }
