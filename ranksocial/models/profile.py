"""SQLAlchemy ORM model for user profiles."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from .base import Base, utcnow


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), ForeignKey("auth_users.id", name="profiles_id_fkey", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    username = Column(String(150), unique=True, nullable=False)
    display_name = Column(String(150), nullable=False)
    bio = Column(String(500), nullable=False, default="")
    avatar_url = Column(String(1024), nullable=False, default="")
    rank_id = Column(String(36), ForeignKey("ranks.id", name="profiles_rank_id_fkey", ondelete="SET NULL"), nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_premium = Column(Boolean, nullable=False, default=False)
    premium_until = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


__all__ = ["Profile"]
