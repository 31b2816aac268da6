# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# -- Requests --------------------------------------------------------------
# Every field is optional at the schema level; AuthService reports missing
# values itself so that the client gets the standard 400 envelope.


class SignupRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class SigninRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(BaseModel):
    # Wire name is refreshToken
    refresh_token: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -- Responses -------------------------------------------------------------


class UserPublic(BaseModel):
    """User fields that are safe to return.  Never includes the hash."""

    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class TokenPair(BaseModel):
    # Serialised as accessToken / refreshToken / user
    access_token: str
    refresh_token: str
    user: UserPublic

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
