"""Password hashing, token minting, and the access guard."""

from datetime import timedelta

import jwt
import pytest

from core.errors import AuthenticationError, AuthorizationError
from core.security import (
    Identity,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    require_identity,
    verify_password,
)
from conftest import bearer


def test_hash_and_verify():
    hashed = hash_password("pw123456")
    assert hashed != hash_password("pw123456")  # salted
    assert verify_password("pw123456", hashed)
    assert not verify_password("pw1234567", hashed)


def test_verify_against_non_hash_is_false():
    assert not verify_password("pw123456", "plain-text-in-db")


def test_refresh_tokens_are_unique():
    assert create_refresh_token(1, "a@x.com") != create_refresh_token(1, "a@x.com")


def test_decode_refresh_token_rejects_access_token():
    with pytest.raises(jwt.InvalidTokenError):
        decode_refresh_token(create_access_token(1, "a@x.com"))


# -- require_identity, called directly ---------------------------------------


def test_guard_returns_identity():
    identity = require_identity(create_access_token(7, "a@x.com"))
    assert identity == Identity(user_id=7, email="a@x.com")


def test_guard_missing_token():
    with pytest.raises(AuthenticationError) as exc:
        require_identity(None)
    assert exc.value.status_code == 401


def test_guard_expired_token():
    token = create_access_token(7, "a@x.com", expires_delta=timedelta(seconds=-5))
    with pytest.raises(AuthenticationError) as exc:
        require_identity(token)
    assert exc.value.message == "Access token expired"


def test_guard_bad_signature():
    token = jwt.encode({"user_id": 7, "sub": "a@x.com", "type": "access"}, "another-secret-another-secret-123", algorithm="HS256")
    with pytest.raises(AuthenticationError) as exc:
        require_identity(token)
    assert exc.value.message == "Invalid access token"


def test_guard_rejects_refresh_token():
    with pytest.raises(AuthorizationError) as exc:
        require_identity(create_refresh_token(7, "a@x.com"))
    assert exc.value.status_code == 403


# -- over HTTP ---------------------------------------------------------------


def test_protected_route_without_token(client):
    resp = client.get("/components")
    assert resp.status_code == 401
    assert resp.json() == {
        "success": False,
        "message": "Access denied. No token provided",
        "errors": None,
    }


def test_protected_route_with_expired_token(client):
    token = create_access_token(1, "ann@x.com", expires_delta=timedelta(seconds=-5))
    resp = client.get("/components", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.json()["message"] == "Access token expired"


def test_protected_route_with_refresh_token(client, ann):
    resp = client.get("/components", headers=bearer(ann["refreshToken"]))
    assert resp.status_code == 403
