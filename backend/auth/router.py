# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – signup, signin, refresh, logout.

Security notes
--------------
* Signin returns the *same* error message whether the email doesn't exist or
  the password is wrong.  This prevents user-enumeration attacks.
* Refresh failures answer 403 rather than 401 so that a client's
  refresh-on-401 logic cannot loop on its own refresh call.
* Logout always answers 200, whatever the token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from core.responses import success_response
from auth.service import AuthService
from auth.schemas import RefreshRequest, SigninRequest, SignupRequest

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# POST /auth/signup
# ---------------------------------------------------------------------------


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    """Register a new account.  Returns the public user fields."""
    user = AuthService(db).signup(body.name, body.email, body.password)
    return success_response(
        "User registered successfully",
        user.model_dump(),
        status.HTTP_201_CREATED,
    )


# ---------------------------------------------------------------------------
# POST /auth/signin
# ---------------------------------------------------------------------------


@router.post("/signin")
def signin(body: SigninRequest, db: Session = Depends(get_db)):
    """Authenticate and return an access / refresh token pair."""
    pair = AuthService(db).signin(body.email, body.password)
    return success_response("Login successful", pair.model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# POST /auth/refresh
# ---------------------------------------------------------------------------


@router.post("/refresh")
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new pair.  The old token stops working."""
    pair = AuthService(db).refresh(body.refresh_token)
    return success_response("Token refreshed successfully", pair.model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# POST /auth/logout
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(body: Optional[RefreshRequest] = None, db: Session = Depends(get_db)):
    """End the server-side session.  Best effort: never fails."""
    AuthService(db).logout(body.refresh_token if body else None)
    return success_response("Logged out successfully")
