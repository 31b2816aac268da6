# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Account and session lifecycle: signup, signin, refresh-token rotation and
logout.

Session model
-------------
* Signin mints a short-lived access token and a long-lived refresh token and
  stores the refresh token on the user row.  Only one refresh token is valid
  per user, so signing in again ends any earlier session.
* Refresh accepts a token only if it verifies, is of type "refresh" and
  equals the stored value.  A new pair is issued and the stored value
  overwritten, so every refresh token is single-use.
* Logout clears the stored token.  It never fails from the caller's point
  of view.
"""

import jwt as _jwt
from fastapi import status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import AuthenticationError, ConflictError, ValidationError
from core.logger import logger
from core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from models.user import User
from auth.schemas import TokenPair, UserPublic

# Generic message used for both "no such email" and "wrong password"
_LOGIN_FAIL = "Invalid email or password"
_REFRESH_FAIL = "Invalid or expired refresh token"


def _required(message: str, **fields) -> None:
    missing = [f"{name} is required" for name, value in fields.items() if not value or not str(value).strip()]
    if missing:
        raise ValidationError(message, errors=missing)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    # -- signup -------------------------------------------------------------

    def signup(self, name: str, email: str, password: str) -> UserPublic:
        _required("All fields are required", name=name, email=email, password=password)

        if self.db.query(User.id).filter(User.email == email).first():
            raise ConflictError("Email already exists")

        user = User(name=name, email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            self.db.rollback()
            raise ConflictError("Email already exists")
        self.db.refresh(user)

        logger.info("user registered | user_id=%d", user.id)
        return UserPublic.model_validate(user)

    # -- signin -------------------------------------------------------------

    def signin(self, email: str, password: str) -> TokenPair:
        _required("Email and password required", email=email, password=password)

        user = self.db.query(User).filter(User.email == email).first()

        # Unified failure path – no information leaks about whether the email exists
        if not user or not verify_password(password, user.password_hash):
            logger.info("signin failed")
            raise AuthenticationError(_LOGIN_FAIL)

        pair = self._issue(user)
        logger.info("signin | user_id=%d", user.id)
        return pair

    # -- refresh ------------------------------------------------------------

    def refresh(self, refresh_token: str) -> TokenPair:
        if not refresh_token:
            raise ValidationError("Refresh token required", errors=["refreshToken is required"])

        try:
            payload = decode_refresh_token(refresh_token)
        except _jwt.InvalidTokenError:
            # ExpiredSignatureError is a subclass
            raise AuthenticationError(_REFRESH_FAIL, status_code=status.HTTP_403_FORBIDDEN)

        user = self.db.query(User).filter(User.id == payload["user_id"]).first()
        if not user or user.refresh_token != refresh_token:
            # Rotated, revoked, or forged for a user that no longer exists
            logger.warning("stale refresh token presented | user_id=%s", payload["user_id"])
            raise AuthenticationError(_REFRESH_FAIL, status_code=status.HTTP_403_FORBIDDEN)

        pair = self._issue(user)
        logger.info("token refreshed | user_id=%d", user.id)
        return pair

    # -- logout -------------------------------------------------------------

    def logout(self, refresh_token: str) -> None:
        if not refresh_token:
            return
        try:
            payload = decode_refresh_token(refresh_token)
        except _jwt.InvalidTokenError:
            logger.debug("logout with unverifiable token ignored")
            return

        user = self.db.query(User).filter(User.id == payload["user_id"]).first()
        if user:
            user.refresh_token = None
            self.db.commit()
            logger.info("logout | user_id=%d", user.id)

    # -- helpers ------------------------------------------------------------

    def _issue(self, user: User) -> TokenPair:
        """Mint a new access/refresh pair and persist the refresh half."""
        access = create_access_token(user.id, user.email)
        refresh = create_refresh_token(user.id, user.email)
        user.refresh_token = refresh
        self.db.commit()
        return TokenPair(
            access_token=access,
            refresh_token=refresh,
            user=UserPublic.model_validate(user),
        )
