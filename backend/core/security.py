# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. FastAPI access guard                     (require_identity)
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from core.config import settings
from core.errors import AuthenticationError, AuthorizationError

_ALGORITHM = "HS256"

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------
# passlib embeds a random per-password salt inside the hash string, so the
# users table needs no separate salt column.


def hash_password(plain: str) -> str:
    """Hash a plaintext password with PBKDF2-SHA256."""
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # stored value is not a pbkdf2_sha256 hash
        return False


# ---------------------------------------------------------------------------
# 2.  JWT – access and refresh tokens
# ---------------------------------------------------------------------------


def _encode(claims: dict, expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)
    to_encode["iat"] = now
    to_encode["exp"] = now + expires_delta
    return _jwt.encode(to_encode, settings.secret_key, algorithm=_ALGORITHM)


def create_access_token(user_id: int, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Short-lived token accepted by :func:`require_identity`."""
    return _encode(
        {"sub": email, "user_id": user_id, "type": ACCESS_TOKEN_TYPE},
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(user_id: int, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Long-lived token that can only be exchanged at /auth/refresh.

    The random ``jti`` guarantees that two tokens minted for the same user in
    the same second still differ, which rotation relies on.
    """
    return _encode(
        {
            "sub": email,
            "user_id": user_id,
            "type": REFRESH_TOKEN_TYPE,
            "jti": secrets.token_hex(16),
        },
        expires_delta or timedelta(days=settings.refresh_token_expire_days),
    )


def decode_token(token: str) -> dict:
    """
    Decode and verify a JWT.  PyJWT exceptions propagate unchanged:
    ``ExpiredSignatureError`` for expiry, ``InvalidTokenError`` otherwise.
    """
    return _jwt.decode(token, settings.secret_key, algorithms=[_ALGORITHM])


def decode_refresh_token(token: str) -> dict:
    """Decode *token* and insist that it is a refresh token."""
    payload = decode_token(token)
    if payload.get("type") != REFRESH_TOKEN_TYPE or "user_id" not in payload:
        raise _jwt.InvalidTokenError("not a refresh token")
    return payload


# ---------------------------------------------------------------------------
# 3.  FastAPI access guard
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity:
    """Who the current request is authenticated as.  Passed into services."""

    user_id: int
    email: str


# The tokenUrl here is only used by the auto-generated OpenAPI docs.
# auto_error=False so that a missing header produces our own envelope.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/signin", auto_error=False)


def require_identity(token: Optional[str] = Depends(oauth2_scheme)) -> Identity:
    """
    Dependency: verify the bearer access token and return an
    :class:`Identity`.  Pure token check – the database is not consulted.

    * no token                  → 401
    * expired                   → 401 "Access token expired"
    * bad signature / malformed → 401 "Invalid access token"
    * refresh token presented   → 403
    """
    if not token:
        raise AuthenticationError("Access denied. No token provided")

    try:
        payload = decode_token(token)
    except _jwt.ExpiredSignatureError:
        raise AuthenticationError("Access token expired")
    except _jwt.InvalidTokenError:
        raise AuthenticationError("Invalid access token")

    if payload.get("type") == REFRESH_TOKEN_TYPE:
        raise AuthorizationError("Refresh token cannot be used for API access")

    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        raise AuthenticationError("Invalid access token")

    return Identity(user_id=user_id, email=payload.get("sub", ""))
