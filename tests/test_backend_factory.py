"""Backend selection from settings and secret validation."""
from __future__ import annotations

import asyncio

import pytest

from ranksocial.backend import create_backend, init_backend
from ranksocial.clients import LocalBackend, RestBackend
from ranksocial.config import Settings
from ranksocial.security.secrets import MissingSecretError, is_placeholder, require_secret


def test_local_mode_builds_usable_backend(tmp_path) -> None:
    settings = Settings(BACKEND_MODE="local", LOCAL_DATABASE_URL=f"sqlite+pysqlite:///{tmp_path / 'factory.db'}")

    init_backend(settings)
    backend = create_backend(settings)

    assert isinstance(backend, LocalBackend)
    assert asyncio.run(backend.table("posts").select("*").execute()).data == []


def test_rest_mode_requires_real_anon_key() -> None:
    with pytest.raises(MissingSecretError):
        create_backend(Settings(BACKEND_MODE="rest", BACKEND_ANON_KEY="your-anon-key"))

    backend = create_backend(Settings(BACKEND_MODE="rest", BACKEND_URL="https://backend.test/", BACKEND_ANON_KEY="k"))
    assert isinstance(backend, RestBackend)
    assert backend.url == "https://backend.test"
    asyncio.run(backend.aclose())


def test_placeholder_detection() -> None:
    assert is_placeholder(None)
    assert is_placeholder("  ChangeMe ")
    assert not is_placeholder("test-secret-key")


def test_missing_secret_names_the_backend_mode(monkeypatch) -> None:
    monkeypatch.delenv("BACKEND_ANON_KEY", raising=False)

    with pytest.raises(MissingSecretError, match="BACKEND_ANON_KEY must be set .* BACKEND_MODE=rest"):
        require_secret("BACKEND_ANON_KEY")
    with pytest.raises(MissingSecretError, match="JWT_SECRET_KEY must be set .* BACKEND_MODE=local"):
        require_secret("JWT_SECRET_KEY", "your-jwt-secret")
    assert require_secret("JWT_SECRET_KEY", "  real-secret ") == "real-secret"
