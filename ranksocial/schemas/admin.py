"""Schemas for the owner admin panel."""
from __future__ import annotations

from pydantic import BaseModel

from .profiles import Profile
from .ranks import Rank


class AdminDataResponse(BaseModel):
    users: list[Profile]
    ranks: list[Rank]


class AdminMutationResponse(BaseModel):
    applied: bool
    data: AdminDataResponse | None = None


__all__ = ["AdminDataResponse", "AdminMutationResponse"]
