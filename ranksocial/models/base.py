"""Declarative base and column defaults for the local backend tables."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = ["Base", "new_id", "utcnow"]
