"""Backend factory and FastAPI dependency yielding one client per request."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.engine import Engine

from .clients import Backend, LocalBackend, RestBackend, create_local_engine, init_local_schema
from .config import Settings, get_settings
from .security.secrets import require_secret

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_local_engine(url: str) -> Engine:
    """Return the shared engine for ``url`` so per-request backends reuse its pool."""

    return create_local_engine(url)


def create_backend(settings: Settings | None = None) -> Backend:
    """Build a backend client according to ``BACKEND_MODE``."""

    settings = settings or get_settings()
    if settings.backend_mode == "local":
        return LocalBackend(
            get_local_engine(settings.local_database_url),
            jwt_secret=require_secret("JWT_SECRET_KEY"),
            token_minutes=settings.local_token_minutes,
        )
    return RestBackend(
        settings.backend_url,
        require_secret("BACKEND_ANON_KEY", settings.backend_anon_key),
        timeout=settings.backend_timeout,
    )


async def get_backend() -> AsyncIterator[Backend]:
    """FastAPI dependency that yields a backend client per request."""

    backend = create_backend()
    try:
        yield backend
    finally:
        await backend.aclose()


def init_backend(settings: Settings | None = None) -> None:
    """Prepare the local backend schema; the hosted backend owns its own schema."""

    settings = settings or get_settings()
    if settings.backend_mode != "local":
        return
    init_local_schema(get_local_engine(settings.local_database_url))
    logger.info("Local backend schema ready at %s", settings.local_database_url)


__all__ = ["create_backend", "get_backend", "get_local_engine", "init_backend"]
