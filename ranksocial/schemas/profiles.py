"""Schemas for profiles and the admin field updates applied to them."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, field_validator

from .ranks import Rank


class Profile(BaseModel):
    id: UUID
    user_id: UUID
    username: str
    display_name: str
    bio: str = ""
    avatar_url: str = ""
    rank_id: UUID | None = None
    is_verified: bool = False
    is_premium: bool = False
    premium_until: datetime | None = None
    created_at: datetime
    rank: Rank | None = None

    @field_validator("bio", "avatar_url", mode="before")
    def blank_when_null(cls, v):
        return "" if v is None else v


class ProfileRankUpdate(BaseModel):
    rank_id: UUID | None = None


class ProfileFlagToggle(BaseModel):
    """Carries the flag value currently displayed; the server writes its inverse."""

    current: bool


__all__ = ["Profile", "ProfileRankUpdate", "ProfileFlagToggle"]
