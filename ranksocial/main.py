"""Application entry point for the FastAPI API."""
from __future__ import annotations

import logging
from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .backend import init_backend
from .config import get_settings
from .routers import admin_router, auth_router, follows_router, posts_router

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version

app = FastAPI(title=APP_NAME, version=API_VERSION)

if settings.cors_origins:
    origins: Iterable[str] = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
else:
    origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(posts_router)
app.include_router(admin_router)
app.include_router(follows_router)


@app.on_event("startup")
async def _startup() -> None:
    """Make sure the backend is usable before serving."""

    try:
        init_backend()
    except Exception:  # pragma: no cover - best effort logging
        logger.exception("Backend initialisation failed")
        raise
    logger.info("Serving %s against %s backend", APP_NAME, settings.backend_mode)


@app.get("/api", tags=["system"])
def api_info() -> dict[str, str]:
    return {"service": APP_NAME, "version": API_VERSION}


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Report which backend the API is configured to use."""

    target = settings.backend_url if settings.backend_mode == "rest" else "local"
    return {"status": "ok", "backend": target}
