"""Pydantic schemas for ranks."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from ..constants import DEFAULT_RANK_COLOR


class Rank(BaseModel):
    id: UUID
    name: str
    color: str = DEFAULT_RANK_COLOR
    priority: int = 0
    created_at: datetime


class RankCreate(BaseModel):
    """Payload used by the admin panel when defining a new rank."""

    name: str
    color: str = DEFAULT_RANK_COLOR
    priority: int = 0


__all__ = ["Rank", "RankCreate"]
