"""Session state for the signed-in identity and the profile derived from it."""
from __future__ import annotations

import logging
from typing import AsyncIterator, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..backend import get_backend
from ..clients import AuthApiError, AuthSession, AuthUser, Backend, BackendConnectionError, BackendError
from ..constants import (
    GENERIC_ERROR_MESSAGE,
    PASSWORD_MIN_LENGTH,
    PASSWORD_MISMATCH_MESSAGE,
    PASSWORD_TOO_SHORT_MESSAGE,
)
from ..schemas import Profile

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)

PROFILE_SELECT = "*, rank:ranks(*)"

SessionListener = Callable[["SessionContext"], None]


class SessionError(Exception):
    """Raised with a human-readable message when sign-in or sign-up fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def validate_sign_up(password: str, confirm_password: str | None = None) -> None:
    """Check the password rules that are enforced before contacting the backend."""

    if confirm_password is not None and password != confirm_password:
        raise SessionError(PASSWORD_MISMATCH_MESSAGE)
    if len(password) < PASSWORD_MIN_LENGTH:
        raise SessionError(PASSWORD_TOO_SHORT_MESSAGE)


def _session_error(exc: Exception) -> SessionError:
    if isinstance(exc, BackendConnectionError):
        return SessionError(GENERIC_ERROR_MESSAGE)
    if isinstance(exc, BackendError):
        return SessionError(exc.message or GENERIC_ERROR_MESSAGE)
    return SessionError(GENERIC_ERROR_MESSAGE)


class SessionContext:
    """Current identity, its resolved profile and a loading flag.

    One context is created per client session and passed explicitly to the
    feed and admin layers. ``initialize`` restores a session and starts
    following auth-state changes, every change re-resolves the profile, and
    ``dispose`` detaches the context on logout or teardown. Listeners
    registered with ``subscribe`` are called after each state change.
    """

    def __init__(self, backend: Backend) -> None:
        self.backend = backend
        self.user: AuthUser | None = None
        self.profile: Profile | None = None
        self.loading = True
        self._listeners: list[SessionListener] = []
        self._unsubscribe_auth: Callable[[], None] | None = None

    @property
    def access_token(self) -> str | None:
        return self.backend.auth.access_token

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    async def _on_auth_state_change(self, event: str, session: AuthSession | None) -> None:
        logger.debug("Auth state changed: %s", event)
        self.user = session.user if session else None
        await self.refresh_profile()
        self._notify()

    async def initialize(self, access_token: str | None = None) -> None:
        """Restore the session held by the backend (or ``access_token``) and resolve its profile."""

        if self._unsubscribe_auth is None:
            self._unsubscribe_auth = self.backend.auth.on_auth_state_change(self._on_auth_state_change)
        try:
            if access_token:
                await self.backend.auth.set_session(access_token)
            else:
                session = self.backend.auth.session
                self.user = session.user if session else None
                await self.refresh_profile()
        finally:
            self.loading = False
            self._notify()

    async def refresh_profile(self) -> Profile | None:
        """Re-resolve the profile (joined with its rank) for the current identity."""

        if self.user is None:
            self.profile = None
            return None
        try:
            response = await (
                self.backend.table("profiles")
                .select(PROFILE_SELECT)
                .eq("user_id", self.user.id)
                .maybe_single()
                .execute()
            )
        except BackendError as exc:
            logger.warning("Failed to resolve profile for %s: %s", self.user.id, exc.message)
            self.profile = None
            return None
        self.profile = Profile.model_validate(response.data) if response.data else None
        return self.profile

    async def sign_in(self, email: str, password: str) -> Profile | None:
        try:
            await self.backend.auth.sign_in_with_password(email, password)
        except BackendError as exc:
            raise _session_error(exc) from exc
        except Exception as exc:
            logger.exception("Unexpected sign-in failure")
            raise _session_error(exc) from exc
        return self.profile

    async def sign_up(
        self,
        email: str,
        password: str,
        username: str,
        display_name: str,
        confirm_password: str | None = None,
    ) -> Profile | None:
        """Create the identity and its profile row with default flags."""

        validate_sign_up(password, confirm_password)
        try:
            result = await self.backend.auth.sign_up(email, password)
            await (
                self.backend.table("profiles")
                .insert(
                    {
                        "id": result.user.id,
                        "user_id": result.user.id,
                        "username": username,
                        "display_name": display_name,
                        "bio": "",
                        "avatar_url": "",
                        "rank_id": None,
                        "is_verified": False,
                        "is_premium": False,
                        "premium_until": None,
                    }
                )
                .execute()
            )
        except BackendError as exc:
            raise _session_error(exc) from exc
        except Exception as exc:
            logger.exception("Unexpected sign-up failure")
            raise _session_error(exc) from exc

        # The auth change fired before the profile row existed
        await self.refresh_profile()
        self._notify()
        return self.profile

    async def sign_out(self) -> None:
        await self.backend.auth.sign_out()
        self.user = None
        self.profile = None
        self._notify()

    def dispose(self) -> None:
        if self._unsubscribe_auth is not None:
            self._unsubscribe_auth()
            self._unsubscribe_auth = None
        self._listeners.clear()
        self.user = None
        self.profile = None


async def get_session_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    backend: Backend = Depends(get_backend),
) -> AsyncIterator[SessionContext]:
    """Yield a session context restored from the bearer token, if any."""

    token = None
    if credentials and credentials.scheme.lower() == "bearer":
        token = credentials.credentials

    context = SessionContext(backend)
    try:
        await context.initialize(token)
    except AuthApiError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    except BackendConnectionError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=GENERIC_ERROR_MESSAGE) from exc
    try:
        yield context
    finally:
        context.dispose()


async def require_session(context: SessionContext = Depends(get_session_context)) -> SessionContext:
    """Resolve the session context, rejecting anonymous requests."""

    if not context.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return context


async def require_profile(context: SessionContext = Depends(require_session)) -> SessionContext:
    """Resolve an authenticated context whose profile row exists."""

    if context.profile is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Profile not found for this account")
    return context


__all__ = [
    "PROFILE_SELECT",
    "SessionContext",
    "SessionError",
    "get_session_context",
    "require_profile",
    "require_session",
    "validate_sign_up",
]
