"""Tests d'inscription, de connexion et de validation des tokens."""

from contactvault.core.http_constants import (
    HTTP_CONFLICT,
    HTTP_CREATED,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
)
from contactvault.domain.auth import create_access_token, decode_token, hash_password, verify_password


def test_duplicate_signup_409(client):
    payload = {"email": "dup@test.io", "password": "pw"}
    assert client.post("/auth/signup", json=payload).status_code == HTTP_CREATED
    r = client.post("/auth/signup", json=payload)
    assert r.status_code == HTTP_CONFLICT
    assert r.json()["code"] == "email_exists"


def test_login_with_wrong_password(client):
    client.post("/auth/signup", json={"email": "user@test.io", "password": "pw"})
    r = client.post("/auth/login", json={"email": "user@test.io", "password": "nope"})
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["code"] == "invalid_credentials"


def test_two_factor_users_get_a_pending_token(client, container):
    client.post(
        "/auth/signup", json={"email": "2fa@test.io", "password": "pw", "two_factor_enabled": True}
    )
    r = client.post("/auth/login", json={"email": "2fa@test.io", "password": "pw"})
    assert r.status_code == HTTP_OK
    assert r.json()["two_factor_pending"] is True
    data = decode_token(
        r.json()["access_token"], container.settings.JWT_SECRET, container.settings.JWT_ALG
    )
    assert data.two_factor_pending is True


def test_me(client, login):
    headers = login("me@test.io")
    r = client.get("/auth/me", headers=headers)
    assert r.status_code == HTTP_OK
    assert r.json()["email"] == "me@test.io"
    assert r.json()["two_factor_pending"] is False


def test_token_for_deleted_user(client, container):
    token = create_access_token(
        container.settings.JWT_SECRET,
        container.settings.JWT_ALG,
        5,
        {"sub": "missing-user", "email": "ghost@test.io"},
    )
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["code"] == "user_not_found"


def test_expired_and_foreign_tokens_are_invalid(container):
    secret, alg = container.settings.JWT_SECRET, container.settings.JWT_ALG
    expired = create_access_token(secret, alg, -1, {"sub": "u", "email": "u@test.io"})
    assert decode_token(expired, secret, alg) is None
    foreign = create_access_token("other-secret", alg, 5, {"sub": "u", "email": "u@test.io"})
    assert decode_token(foreign, secret, alg) is None


def test_password_hashing():
    h = hash_password("s3cret")
    assert h != "s3cret"
    assert verify_password("s3cret", h)
    assert not verify_password("wrong", h)
