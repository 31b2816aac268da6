"""Signup / signin / refresh / logout, over HTTP and directly on AuthService."""

import pytest

from auth.service import AuthService
from core.errors import AuthenticationError, ConflictError, ValidationError
from core.security import decode_token
from models.user import User
from conftest import PASSWORD, bearer, register_and_signin, signin, signup


# -- signup -------------------------------------------------------------------


def test_signup_returns_public_fields(client):
    resp = signup(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert set(body["data"]) == {"id", "name", "email"}
    assert body["data"]["name"] == "Ann"
    assert body["data"]["email"] == "ann@x.com"


def test_signup_missing_fields(client):
    resp = client.post("/auth/signup", json={"name": "Ann"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert "email is required" in body["errors"]
    assert "password is required" in body["errors"]


def test_signup_duplicate_email(client):
    signup(client)
    resp = signup(client, name="Other")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already exists"


def test_email_is_case_sensitive(client):
    signup(client)
    assert signup(client, email="Ann@x.com").status_code == 201
    assert signin(client, email="ANN@X.COM").status_code == 401


def test_password_hash_is_stored_not_plaintext(client, api_db):
    signup(client)
    session = api_db()
    try:
        user = session.query(User).filter(User.email == "ann@x.com").one()
        assert user.password_hash != PASSWORD
        assert user.password_hash.startswith("$pbkdf2-sha256$")
        assert user.refresh_token is None
    finally:
        session.close()


# -- signin -------------------------------------------------------------------


def test_signin_returns_token_pair_and_user(client):
    signup(client)
    resp = signin(client)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert set(data) == {"accessToken", "refreshToken", "user"}
    assert data["user"]["email"] == "ann@x.com"

    access = decode_token(data["accessToken"])
    refresh = decode_token(data["refreshToken"])
    assert access["type"] == "access"
    assert refresh["type"] == "refresh"
    assert access["user_id"] == refresh["user_id"] == data["user"]["id"]
    assert refresh["exp"] > access["exp"]


def test_signin_wrong_password_matches_unknown_email(client):
    signup(client)
    wrong_password = signin(client, password="not-the-password")
    unknown_email = signin(client, email="nobody@x.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["message"] == "Invalid email or password"


def test_signin_missing_fields(client):
    resp = client.post("/auth/signin", json={})
    assert resp.status_code == 400
    assert resp.json()["errors"] == ["email is required", "password is required"]


def test_signin_malformed_json(client):
    resp = client.post(
        "/auth/signin",
        content="not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_second_signin_ends_first_session(client):
    first = register_and_signin(client)
    second = signin(client).json()["data"]

    assert client.post("/auth/refresh", json={"refreshToken": first["refreshToken"]}).status_code == 403
    assert client.post("/auth/refresh", json={"refreshToken": second["refreshToken"]}).status_code == 200


# -- refresh ------------------------------------------------------------------


def test_refresh_rotates_tokens(client, ann):
    resp = client.post("/auth/refresh", json={"refreshToken": ann["refreshToken"]})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["refreshToken"] != ann["refreshToken"]
    assert data["user"]["email"] == "ann@x.com"

    # the new access token works
    assert client.get("/components", headers=bearer(data["accessToken"])).status_code == 200


def test_refresh_token_is_single_use(client, ann):
    first = client.post("/auth/refresh", json={"refreshToken": ann["refreshToken"]})
    assert first.status_code == 200

    replay = client.post("/auth/refresh", json={"refreshToken": ann["refreshToken"]})
    assert replay.status_code == 403
    assert replay.json()["message"] == "Invalid or expired refresh token"

    # the rotated token is still good
    rotated = first.json()["data"]["refreshToken"]
    assert client.post("/auth/refresh", json={"refreshToken": rotated}).status_code == 200


def test_refresh_rejects_access_token(client, ann):
    resp = client.post("/auth/refresh", json={"refreshToken": ann["accessToken"]})
    assert resp.status_code == 403


def test_refresh_rejects_garbage(client):
    resp = client.post("/auth/refresh", json={"refreshToken": "garbage"})
    assert resp.status_code == 403
    assert resp.json()["success"] is False


def test_refresh_requires_token(client):
    resp = client.post("/auth/refresh", json={})
    assert resp.status_code == 400
    assert resp.json()["errors"] == ["refreshToken is required"]


# -- logout -------------------------------------------------------------------


def test_logout_with_garbage_token_succeeds(client):
    resp = client.post("/auth/logout", json={"refreshToken": "garbage"})
    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_logout_without_body_succeeds(client):
    assert client.post("/auth/logout").status_code == 200


def test_logout_revokes_refresh_token(client, ann):
    assert client.post("/auth/logout", json={"refreshToken": ann["refreshToken"]}).status_code == 200
    resp = client.post("/auth/refresh", json={"refreshToken": ann["refreshToken"]})
    assert resp.status_code == 403


# -- service level ------------------------------------------------------------


def test_service_signup_then_signin(db):
    service = AuthService(db)
    user = service.signup("Cara", "cara@x.com", "secret99")
    pair = service.signin("cara@x.com", "secret99")
    assert pair.user.id == user.id
    assert db.get(User, user.id).refresh_token == pair.refresh_token


def test_service_errors(db):
    service = AuthService(db)
    service.signup("Cara", "cara@x.com", "secret99")

    with pytest.raises(ValidationError) as exc:
        service.signup("", "dan@x.com", "secret99")
    assert exc.value.errors == ["name is required"]

    with pytest.raises(ConflictError):
        service.signup("Cara 2", "cara@x.com", "other-pass")

    with pytest.raises(AuthenticationError) as exc:
        service.signin("cara@x.com", "wrong")
    assert exc.value.status_code == 401


def test_service_refresh_failure_is_403(db):
    service = AuthService(db)
    service.signup("Cara", "cara@x.com", "secret99")
    pair = service.signin("cara@x.com", "secret99")
    service.refresh(pair.refresh_token)

    with pytest.raises(AuthenticationError) as exc:
        service.refresh(pair.refresh_token)
    assert exc.value.status_code == 403


def test_service_logout_clears_stored_token(db):
    service = AuthService(db)
    service.signup("Cara", "cara@x.com", "secret99")
    pair = service.signin("cara@x.com", "secret99")

    service.logout("not-a-token")
    assert db.get(User, pair.user.id).refresh_token == pair.refresh_token

    service.logout(pair.refresh_token)
    db.expire_all()
    assert db.get(User, pair.user.id).refresh_token is None
