"""HTTP client for the hosted table and auth APIs."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from .base import (
    SIGNED_IN,
    SIGNED_OUT,
    AuthApiError,
    AuthClient,
    AuthResponse,
    AuthSession,
    AuthUser,
    Backend,
    BackendConnectionError,
    BackendError,
    TableQuery,
)

logger = logging.getLogger(__name__)

_METHODS = {"select": "GET", "insert": "POST", "update": "PATCH", "delete": "DELETE"}


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_params(query: TableQuery) -> list[tuple[str, str]]:
    """Translate a :class:`TableQuery` into PostgREST query-string parameters."""

    params: list[tuple[str, str]] = []
    if query.method == "select":
        params.append(("select", "".join(query.columns.split())))
    for item in query.filters:
        if item.operator == "in":
            joined = ",".join(_format_value(value) for value in item.value)
            params.append((item.column, f"in.({joined})"))
        elif item.value is None:
            params.append((item.column, "is.null"))
        else:
            params.append((item.column, f"eq.{_format_value(item.value)}"))
    if query.ordering:
        params.append(
            ("order", ",".join(f"{column}.{'desc' if desc else 'asc'}" for column, desc in query.ordering))
        )
    if query.row_limit is not None:
        params.append(("limit", str(query.row_limit)))
    return params


def _error_from_response(response: httpx.Response, error_cls: type[BackendError] = BackendError) -> BackendError:
    message: str | None = None
    code: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error_description") or body.get("msg") or body.get("error")
        raw_code = body.get("code") or body.get("error_code")
        code = str(raw_code) if raw_code is not None else None
    return error_cls(
        message or f"Backend request failed with status {response.status_code}",
        status_code=response.status_code,
        code=code,
    )


def _parse_content_range(value: str | None, status_code: int) -> int:
    """Read the total from a ``Content-Range`` header such as ``0-24/3573`` or ``*/0``."""

    total = (value or "").rpartition("/")[2]
    if not total.isdigit():
        raise BackendError("Backend did not report a row count", status_code=status_code)
    return int(total)


def _parse_user(payload: dict[str, Any]) -> AuthUser:
    user_id = payload.get("id")
    if not user_id:
        raise AuthApiError("Auth response did not include a user", status_code=500)
    return AuthUser(id=str(user_id), email=payload.get("email"))


def _parse_session(payload: dict[str, Any]) -> AuthSession | None:
    token = payload.get("access_token")
    if not token:
        return None
    return AuthSession(
        access_token=token,
        user=_parse_user(payload.get("user") or {}),
        refresh_token=payload.get("refresh_token"),
        expires_in=payload.get("expires_in"),
    )


class RestAuthClient(AuthClient):
    def __init__(self, backend: "RestBackend") -> None:
        super().__init__()
        self._backend = backend

    async def _post(self, path: str, *, json: dict[str, Any] | None = None, params=None, access_token=None):
        response = await self._backend.request("POST", path, json=json, params=params, access_token=access_token)
        if response.is_error:
            raise _error_from_response(response, AuthApiError)
        return response

    async def sign_up(self, email: str, password: str) -> AuthResponse:
        response = await self._post(
            "/auth/v1/signup",
            json={"email": email, "password": password},
            access_token=self._backend.anon_key,
        )
        body = response.json()
        session = _parse_session(body)
        if session is None:
            # Email confirmation pending: the body is the user itself
            return AuthResponse(user=_parse_user(body.get("user") or body))
        await self._set_session(session, SIGNED_IN)
        return AuthResponse(user=session.user, session=session)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        response = await self._post(
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            access_token=self._backend.anon_key,
        )
        session = _parse_session(response.json())
        if session is None:
            raise AuthApiError("Auth response did not include a session", status_code=500)
        await self._set_session(session, SIGNED_IN)
        return session

    async def sign_out(self) -> None:
        token = self.access_token
        if token:
            try:
                await self._post("/auth/v1/logout", access_token=token)
            except BackendError as exc:
                logger.warning("Remote sign-out failed, clearing local session anyway: %s", exc.message)
        await self._set_session(None, SIGNED_OUT)

    async def get_user(self, access_token: str | None = None) -> AuthUser:
        token = access_token or self.access_token
        if not token:
            raise AuthApiError("Auth session missing", status_code=401)
        response = await self._backend.request("GET", "/auth/v1/user", access_token=token)
        if response.is_error:
            raise _error_from_response(response, AuthApiError)
        return _parse_user(response.json())


class RestBackend(Backend):
    """PostgREST/GoTrue client built on :class:`httpx.AsyncClient`."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self._client = httpx.AsyncClient(base_url=self.url, timeout=timeout, transport=transport)
        self.auth = RestAuthClient(self)

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        token = access_token or self.auth.access_token or self.anon_key
        return {"apikey": self.anon_key, "Authorization": f"Bearer {token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> httpx.Response:
        merged = self._headers(access_token)
        if headers:
            merged.update(headers)
        try:
            return await self._client.request(method, path, params=params, json=json, headers=merged)
        except httpx.HTTPError as exc:
            logger.warning("Backend request %s %s failed: %s", method, path, exc)
            raise BackendConnectionError("Unable to reach the backend") from exc

    async def execute_query(self, query: TableQuery) -> list[dict[str, Any]]:
        headers: dict[str, str] = {}
        if query.method != "select":
            headers["Prefer"] = "return=representation"
        response = await self.request(
            _METHODS[query.method],
            f"/rest/v1/{query.table}",
            params=build_query_params(query),
            json=query.payload if query.method in {"insert", "update"} else None,
            headers=headers,
        )
        if response.is_error:
            raise _error_from_response(response)
        if not response.content:
            return []
        data = response.json()
        if isinstance(data, dict):
            return [data]
        return list(data)

    async def count_query(self, query: TableQuery) -> int:
        params = [(key, value) for key, value in build_query_params(query) if key not in {"order", "limit"}]
        response = await self.request(
            "HEAD",
            f"/rest/v1/{query.table}",
            params=params,
            headers={"Prefer": f"count={query.count or 'exact'}"},
        )
        if response.is_error:
            raise _error_from_response(response)
        return _parse_content_range(response.headers.get("content-range"), response.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["RestBackend", "RestAuthClient", "build_query_params"]
