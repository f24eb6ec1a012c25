"""Shared fixtures: a throwaway local backend per test plus profile and session factories."""
from __future__ import annotations

import asyncio
import os
from typing import Callable, Iterator

import pytest

os.environ.setdefault("BACKEND_MODE", "local")
os.environ.setdefault("LOCAL_DATABASE_URL", "sqlite+pysqlite:///./test_ranksocial.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from sqlalchemy.engine import Engine  # noqa: E402

from ranksocial.clients import LocalBackend, create_local_engine, init_local_schema  # noqa: E402
from ranksocial.services import SessionContext  # noqa: E402

TEST_SECRET = "test-secret-key"
TEST_PASSWORD = "password123"


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    engine = create_local_engine(f"sqlite+pysqlite:///{tmp_path / 'backend.db'}")
    init_local_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def backend(engine: Engine) -> LocalBackend:
    return LocalBackend(engine, jwt_secret=TEST_SECRET)


async def _create_profile(backend: LocalBackend, username: str, rank_priority: int | None) -> dict:
    result = await backend.auth.sign_up(f"{username}@example.com", TEST_PASSWORD)
    rank_id = None
    if rank_priority is not None:
        rank = await (
            backend.table("ranks")
            .insert({"name": f"{username}-rank", "color": "#FFD700", "priority": rank_priority})
            .execute()
        )
        rank_id = rank.data[0]["id"]
    response = await (
        backend.table("profiles")
        .insert(
            {
                "id": result.user.id,
                "user_id": result.user.id,
                "username": username,
                "display_name": username.title(),
                "rank_id": rank_id,
            }
        )
        .execute()
    )
    row = response.data[0]
    row["access_token"] = result.session.access_token
    return row


@pytest.fixture
def profile_factory(backend: LocalBackend) -> Callable[..., dict]:
    """Create an identity with a profile row; ``rank_priority`` also attaches a fresh rank."""

    def _factory(username: str, *, rank_priority: int | None = None) -> dict:
        return asyncio.run(_create_profile(backend, username, rank_priority))

    return _factory


@pytest.fixture
def session_factory(engine: Engine) -> Callable[[str | None], SessionContext]:
    """Restore a session context on its own backend client, as a separate browser would."""

    def _factory(access_token: str | None) -> SessionContext:
        context = SessionContext(LocalBackend(engine, jwt_secret=TEST_SECRET))
        asyncio.run(context.initialize(access_token))
        return context

    return _factory
