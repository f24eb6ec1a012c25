"""
Runtime configuration helpers for the social client.

Loads backend coordinates and feature switches from the environment and the
.env file located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    app_name: str = Field(default="RankSocial", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")

    # "rest" talks to the hosted backend, "local" uses the in-process SQLAlchemy stand-in
    backend_mode: Literal["rest", "local"] = Field(default="rest", alias="BACKEND_MODE")
    backend_url: str = Field(default="http://localhost:54321", alias="BACKEND_URL")
    backend_anon_key: str | None = Field(default=None, alias="BACKEND_ANON_KEY")
    # None disables the request timeout; calls are not cancellable once issued
    backend_timeout: float | None = Field(default=None, alias="BACKEND_TIMEOUT")

    local_database_url: str = Field(default="sqlite+pysqlite:///./ranksocial_local.db", alias="LOCAL_DATABASE_URL")
    local_token_minutes: int = Field(default=60, alias="LOCAL_TOKEN_MINUTES")

    # Resolve like status with one batched query instead of one query per post
    feed_batch_likes: bool = Field(default=False, alias="FEED_BATCH_LIKES")

    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
