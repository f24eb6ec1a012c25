"""Table query builder, auth session state and errors shared by backend clients."""
from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable
from uuid import UUID


class BackendError(RuntimeError):
    """Raised when the backend rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class BackendConnectionError(BackendError):
    """Raised when the backend cannot be reached at all."""


class AuthApiError(BackendError):
    """Raised when the auth API rejects credentials or a token."""


@dataclass(slots=True)
class AuthUser:
    id: str
    email: str | None = None


@dataclass(slots=True)
class AuthSession:
    access_token: str
    user: AuthUser
    refresh_token: str | None = None
    expires_in: int | None = None


@dataclass(slots=True)
class AuthResponse:
    """Result of a sign-up; ``session`` is None when the backend requires email confirmation."""

    user: AuthUser
    session: AuthSession | None = None


@dataclass(slots=True)
class BackendResponse:
    data: Any
    count: int | None = None


@dataclass(slots=True)
class Filter:
    column: str
    operator: str
    value: Any


AuthListener = Callable[[str, AuthSession | None], Awaitable[None] | None]

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_RESTORED = "TOKEN_RESTORED"


def to_wire(value: Any) -> Any:
    """Convert Python values into the JSON-compatible form the backend stores."""

    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _row_to_wire(row: dict[str, Any]) -> dict[str, Any]:
    return {key: to_wire(value) for key, value in row.items()}


class TableQuery:
    """Chainable description of one request against a single table."""

    def __init__(self, backend: "Backend", table: str) -> None:
        self._backend = backend
        self.table = table
        self.method = "select"
        self.columns = "*"
        self.payload: list[dict[str, Any]] | dict[str, Any] | None = None
        self.filters: list[Filter] = []
        self.ordering: list[tuple[str, bool]] = []
        self.row_limit: int | None = None
        self.single = False
        self.count: str | None = None
        self.head = False

    def select(self, columns: str = "*", *, count: str | None = None, head: bool = False) -> "TableQuery":
        """Select ``columns``; ``count="exact"`` also reports the total matching rows.

        With ``head`` only the count is requested and ``data`` is None.
        """

        self.method = "select"
        self.columns = columns
        self.count = count
        self.head = head
        return self

    def insert(self, rows: dict[str, Any] | list[dict[str, Any]]) -> "TableQuery":
        self.method = "insert"
        batch = rows if isinstance(rows, list) else [rows]
        self.payload = [_row_to_wire(row) for row in batch]
        return self

    def update(self, values: dict[str, Any]) -> "TableQuery":
        self.method = "update"
        self.payload = _row_to_wire(values)
        return self

    def delete(self) -> "TableQuery":
        self.method = "delete"
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        self.filters.append(Filter(column, "eq", to_wire(value)))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "TableQuery":
        self.filters.append(Filter(column, "in", [to_wire(value) for value in values]))
        return self

    def order(self, column: str, *, desc: bool = False) -> "TableQuery":
        self.ordering.append((column, desc))
        return self

    def limit(self, count: int) -> "TableQuery":
        self.row_limit = count
        return self

    def maybe_single(self) -> "TableQuery":
        self.single = True
        return self

    async def execute(self) -> BackendResponse:
        total = await self._backend.count_query(self) if self.count else None
        if self.head:
            return BackendResponse(data=None, count=total)
        rows = await self._backend.execute_query(self)
        if not self.single:
            return BackendResponse(data=rows, count=total)
        if len(rows) > 1:
            raise BackendError(
                "JSON object requested, multiple rows returned",
                status_code=406,
                code="PGRST116",
            )
        return BackendResponse(data=rows[0] if rows else None, count=total)


class AuthClient(ABC):
    """Holds the current auth session and notifies listeners when it changes."""

    def __init__(self) -> None:
        self.session: AuthSession | None = None
        self._listeners: list[AuthListener] = []

    @property
    def access_token(self) -> str | None:
        return self.session.access_token if self.session else None

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    async def _set_session(self, session: AuthSession | None, event: str) -> None:
        self.session = session
        for listener in list(self._listeners):
            result = listener(event, session)
            if inspect.isawaitable(result):
                await result

    async def set_session(self, access_token: str) -> AuthUser:
        """Adopt an access token issued earlier, validating it against the backend."""

        user = await self.get_user(access_token)
        await self._set_session(AuthSession(access_token=access_token, user=user), TOKEN_RESTORED)
        return user

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthResponse: ...

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> AuthSession: ...

    @abstractmethod
    async def sign_out(self) -> None: ...

    @abstractmethod
    async def get_user(self, access_token: str | None = None) -> AuthUser: ...


class Backend(ABC):
    """Handle to the table store; ``table()`` starts a query, ``auth`` manages identity."""

    auth: AuthClient

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    @abstractmethod
    async def execute_query(self, query: TableQuery) -> list[dict[str, Any]]:
        """Run ``query`` and return the affected or selected rows."""

    @abstractmethod
    async def count_query(self, query: TableQuery) -> int:
        """Return how many rows match the filters of ``query``, ignoring order and limit."""

    async def aclose(self) -> None:
        return None

    async def __aenter__(self) -> "Backend":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = [
    "AuthApiError",
    "AuthClient",
    "AuthListener",
    "AuthResponse",
    "AuthSession",
    "AuthUser",
    "Backend",
    "BackendConnectionError",
    "BackendError",
    "BackendResponse",
    "Filter",
    "SIGNED_IN",
    "SIGNED_OUT",
    "TOKEN_RESTORED",
    "TableQuery",
    "to_wire",
]
