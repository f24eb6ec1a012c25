"""SQLAlchemy ORM model for identities managed by the local auth API."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String

from .base import Base, new_id, utcnow


class AuthUser(Base):
    __tablename__ = "auth_users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    encrypted_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


__all__ = ["AuthUser"]
