"""
Pydantic models for the authentication endpoints and token payload.

Request bodies keep every field optional so that the service layer can
answer missing fields with the same 400 message regardless of which
one was omitted.
"""

from typing import Optional

from pydantic import Field

from .common import CamelModel
from .user import UserProfile, UserRead


class TokenPayload(CamelModel):
    """Identity carried by an access token."""

    user_id: str
    email: str


class SignupRequest(CamelModel):
    email: Optional[str] = Field(None, examples=["ada@example.com"])
    password: Optional[str] = Field(None, examples=["correct horse battery staple"])
    name: Optional[str] = Field(None, examples=["Ada Lovelace"])


class LoginRequest(CamelModel):
    email: Optional[str] = Field(None, examples=["ada@example.com"])
    password: Optional[str] = None


class SignupResponse(CamelModel):
    user: UserProfile


class LoginResponse(CamelModel):
    auth_token: str
    user: UserRead


class VerifyResponse(CamelModel):
    user: UserRead
