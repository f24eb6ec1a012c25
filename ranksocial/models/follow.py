"""SQLAlchemy ORM model for follower relationships."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint

from .base import Base, new_id, utcnow


class Follow(Base):
    __tablename__ = "follows"

    id = Column(String(36), primary_key=True, default=new_id)
    follower_id = Column(
        String(36), ForeignKey("profiles.id", name="follows_follower_id_fkey", ondelete="CASCADE"), nullable=False
    )
    following_id = Column(
        String(36), ForeignKey("profiles.id", name="follows_following_id_fkey", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("follower_id", "following_id", name="follows_follower_id_following_id_key"),)


__all__ = ["Follow"]
