"""SQLAlchemy ORM model for ranks."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String

from ..constants import DEFAULT_RANK_COLOR
from .base import Base, new_id, utcnow


class Rank(Base):
    __tablename__ = "ranks"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    color = Column(String(16), nullable=False, default=DEFAULT_RANK_COLOR)
    priority = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


__all__ = ["Rank"]
