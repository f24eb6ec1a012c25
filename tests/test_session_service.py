"""Session context: sign-up, sign-in, restore and profile resolution."""
from __future__ import annotations

import asyncio

import pytest

from ranksocial.clients import BackendConnectionError, BackendError, LocalBackend
from ranksocial.constants import GENERIC_ERROR_MESSAGE, PASSWORD_MISMATCH_MESSAGE, PASSWORD_TOO_SHORT_MESSAGE
from ranksocial.services import SessionContext, SessionError, validate_sign_up

TEST_SECRET = "test-secret-key"


def test_validate_sign_up_checks_confirmation_before_length() -> None:
    with pytest.raises(SessionError) as mismatch:
        validate_sign_up("abc", "abd")
    with pytest.raises(SessionError) as too_short:
        validate_sign_up("abc", "abc")

    assert mismatch.value.message == PASSWORD_MISMATCH_MESSAGE
    assert too_short.value.message == PASSWORD_TOO_SHORT_MESSAGE
    validate_sign_up("abcdef", "abcdef")


def test_sign_up_creates_profile_with_defaults(engine) -> None:
    context = SessionContext(LocalBackend(engine, jwt_secret=TEST_SECRET))
    notified: list[SessionContext] = []
    context.subscribe(notified.append)

    profile = asyncio.run(
        context.sign_up("ana@example.com", "password123", "ana", "Ana", confirm_password="password123")
    )

    assert profile is not None
    assert profile.username == "ana"
    assert profile.bio == ""
    assert profile.rank is None
    assert not profile.is_verified and not profile.is_premium
    assert str(profile.id) == context.user.id
    assert context.access_token
    assert notified


def test_sign_up_with_short_password_never_contacts_backend(engine, monkeypatch) -> None:
    backend = LocalBackend(engine, jwt_secret=TEST_SECRET)
    context = SessionContext(backend)

    async def _fail(*args, **kwargs):
        raise AssertionError("backend should not be called")

    monkeypatch.setattr(backend.auth, "sign_up", _fail)

    with pytest.raises(SessionError, match=PASSWORD_TOO_SHORT_MESSAGE):
        asyncio.run(context.sign_up("ana@example.com", "12345", "ana", "Ana"))


def test_sign_up_with_mismatched_confirmation_never_contacts_backend(engine, monkeypatch) -> None:
    backend = LocalBackend(engine, jwt_secret=TEST_SECRET)
    context = SessionContext(backend)

    async def _fail(*args, **kwargs):
        raise AssertionError("backend should not be called")

    monkeypatch.setattr(backend.auth, "sign_up", _fail)
    monkeypatch.setattr(backend, "execute_query", _fail)

    with pytest.raises(SessionError) as excinfo:
        asyncio.run(
            context.sign_up("ana@example.com", "password123", "ana", "Ana", confirm_password="password321")
        )

    assert excinfo.value.message == PASSWORD_MISMATCH_MESSAGE
    assert context.user is None


def test_sign_in_with_wrong_password_surfaces_backend_message(profile_factory, session_factory) -> None:
    profile_factory("ana")
    context = session_factory(None)

    with pytest.raises(SessionError) as excinfo:
        asyncio.run(context.sign_in("ana@example.com", "wrong-password"))

    assert excinfo.value.message == "Invalid login credentials"
    assert context.user is None


def test_sign_in_connection_failure_uses_generic_message(session_factory, monkeypatch) -> None:
    context = session_factory(None)

    async def _unreachable(email: str, password: str):
        raise BackendConnectionError("Unable to reach the backend")

    monkeypatch.setattr(context.backend.auth, "sign_in_with_password", _unreachable)

    with pytest.raises(SessionError) as excinfo:
        asyncio.run(context.sign_in("ana@example.com", "password123"))
    assert excinfo.value.message == GENERIC_ERROR_MESSAGE


def test_sign_in_resolves_profile_with_rank(profile_factory, session_factory) -> None:
    profile_factory("ana", rank_priority=1000)
    context = session_factory(None)

    profile = asyncio.run(context.sign_in("ana@example.com", "password123"))

    assert profile is not None
    assert profile.rank is not None and profile.rank.priority == 1000
    assert context.is_authenticated


def test_initialize_restores_session_from_token(profile_factory, session_factory) -> None:
    ana = profile_factory("ana")

    context = session_factory(ana["access_token"])

    assert context.loading is False
    assert context.user is not None and context.user.id == ana["id"]
    assert context.profile is not None and context.profile.username == "ana"


def test_initialize_without_token_stays_anonymous(session_factory) -> None:
    context = session_factory(None)

    assert context.loading is False
    assert context.user is None
    assert context.profile is None


def test_identity_without_profile_resolves_to_none(engine, session_factory) -> None:
    backend = LocalBackend(engine, jwt_secret=TEST_SECRET)
    result = asyncio.run(backend.auth.sign_up("ghost@example.com", "password123"))

    context = session_factory(result.session.access_token)

    assert context.user is not None
    assert context.profile is None


def test_profile_lookup_failure_clears_profile(profile_factory, session_factory, monkeypatch) -> None:
    ana = profile_factory("ana")
    context = session_factory(ana["access_token"])

    async def _broken(query):
        raise BackendError("boom", status_code=500)

    monkeypatch.setattr(context.backend, "execute_query", _broken)

    assert asyncio.run(context.refresh_profile()) is None
    assert context.profile is None


def test_sign_out_clears_identity_and_notifies(profile_factory, session_factory) -> None:
    ana = profile_factory("ana")
    context = session_factory(ana["access_token"])
    notified: list[SessionContext] = []
    unsubscribe = context.subscribe(notified.append)

    asyncio.run(context.sign_out())

    assert context.user is None
    assert context.profile is None
    assert context.access_token is None
    assert notified

    seen = len(notified)
    unsubscribe()
    asyncio.run(context.sign_out())
    assert len(notified) == seen


def test_dispose_stops_following_auth_changes(profile_factory, session_factory) -> None:
    ana = profile_factory("ana")
    context = session_factory(ana["access_token"])

    context.dispose()
    asyncio.run(context.backend.auth.sign_in_with_password("ana@example.com", "password123"))

    assert context.user is None
    assert context.profile is None
