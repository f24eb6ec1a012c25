"""Pydantic schemas for the session endpoints."""
from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, EmailStr

from .profiles import Profile


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str
    username: str
    display_name: str


class SessionResponse(BaseModel):
    access_token: str | None = None
    user_id: UUID | None = None
    email: str | None = None
    profile: Profile | None = None
    token_type: str = "bearer"


__all__ = ["SignInRequest", "SignUpRequest", "SessionResponse"]
