"""In-process stand-in for the hosted backend, persisted with SQLAlchemy.

Mirrors the behaviour the client relies on: relationship expansion in
``select``, post counters maintained on like/comment writes, unique and
foreign-key violations reported with PostgreSQL error codes, and password
sign-in issuing signed access tokens. Row-level security is not emulated.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import Column, Table, create_engine, delete, event, func, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.schema import ForeignKey
from sqlalchemy.types import DateTime

from ..constants import PASSWORD_MIN_LENGTH
from ..models import AuthUser as AuthUserRow
from ..models import Base
from ..models.base import new_id
from .base import (
    SIGNED_IN,
    SIGNED_OUT,
    AuthApiError,
    AuthClient,
    AuthResponse,
    AuthSession,
    AuthUser,
    Backend,
    BackendError,
    Filter,
    TableQuery,
)
from .select import SelectSpec, parse_select

logger = logging.getLogger(__name__)

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ALGORITHM = "HS256"

# child table -> (column pointing at posts.id, counter column on posts)
_POST_COUNTERS = {
    "likes": ("post_id", "likes_count"),
    "comments": ("post_id", "comments_count"),
}

_PRIVATE_TABLES = {AuthUserRow.__tablename__}


def create_local_engine(url: str) -> Engine:
    """Create an engine for the local backend, enforcing foreign keys on SQLite."""

    connect_args: dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_local_schema(engine: Engine) -> None:
    """Create the backend tables when missing."""

    Base.metadata.create_all(bind=engine)


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return value


def _serialize_row(row: dict[str, Any]) -> dict[str, Any]:
    return {key: _serialize(value) for key, value in row.items()}


def _integrity_error(exc: IntegrityError) -> BackendError:
    detail = str(exc.orig).lower()
    if "unique" in detail or "duplicate" in detail:
        return BackendError("duplicate key value violates unique constraint", status_code=409, code="23505")
    if "foreign key" in detail:
        return BackendError("insert or update violates foreign key constraint", status_code=409, code="23503")
    if "not null" in detail:
        return BackendError("null value violates not-null constraint", status_code=400, code="23502")
    return BackendError("integrity constraint violated", status_code=409)


class LocalAuthClient(AuthClient):
    def __init__(self, backend: "LocalBackend", *, jwt_secret: str, token_minutes: int = 60) -> None:
        super().__init__()
        self._backend = backend
        self._secret = jwt_secret
        self._token_minutes = token_minutes

    def _issue(self, user: AuthUser) -> AuthSession:
        now = datetime.now(timezone.utc)
        lifetime = timedelta(minutes=self._token_minutes)
        payload = {"sub": user.id, "email": user.email, "role": "authenticated", "iat": now, "exp": now + lifetime}
        token = jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        return AuthSession(access_token=token, user=user, expires_in=int(lifetime.total_seconds()))

    def _register(self, user_id: str, email: str, password: str) -> None:
        users = AuthUserRow.__table__
        hashed = _pwd_context.hash(password)
        with self._backend.engine.begin() as conn:
            existing = conn.execute(select(users.c.id).where(users.c.email == email)).first()
            if existing is not None:
                raise AuthApiError("User already registered", status_code=422, code="user_already_exists")
            conn.execute(insert(users).values(id=user_id, email=email, encrypted_password=hashed))

    def _find_user(self, clause) -> dict[str, Any] | None:
        users = AuthUserRow.__table__
        with self._backend.engine.connect() as conn:
            row = conn.execute(select(users).where(clause)).mappings().first()
        return dict(row) if row is not None else None

    async def sign_up(self, email: str, password: str) -> AuthResponse:
        normalized = email.strip().lower()
        if len(password) < PASSWORD_MIN_LENGTH:
            raise AuthApiError(
                f"Password should be at least {PASSWORD_MIN_LENGTH} characters.",
                status_code=422,
                code="weak_password",
            )

        user_id = new_id()
        try:
            await asyncio.to_thread(self._register, user_id, normalized, password)
        except SQLAlchemyError as exc:
            logger.exception("Failed to register identity")
            raise AuthApiError("Database error saving new user", status_code=500, code="unexpected_failure") from exc

        user = AuthUser(id=user_id, email=normalized)
        session = self._issue(user)
        await self._set_session(session, SIGNED_IN)
        return AuthResponse(user=user, session=session)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        users = AuthUserRow.__table__
        row = await asyncio.to_thread(self._find_user, users.c.email == email.strip().lower())

        if row is None or not await asyncio.to_thread(self._verify, password, row["encrypted_password"]):
            raise AuthApiError("Invalid login credentials", status_code=400, code="invalid_credentials")

        session = self._issue(AuthUser(id=row["id"], email=row["email"]))
        await self._set_session(session, SIGNED_IN)
        return session

    @staticmethod
    def _verify(password: str, hashed: str) -> bool:
        try:
            return _pwd_context.verify(password, hashed)
        except (ValueError, TypeError):
            logger.exception("Password verification failed due to a malformed hash")
            return False

    async def sign_out(self) -> None:
        await self._set_session(None, SIGNED_OUT)

    async def get_user(self, access_token: str | None = None) -> AuthUser:
        token = access_token or self.access_token
        if not token:
            raise AuthApiError("Auth session missing", status_code=401, code="session_missing")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except JWTError as exc:
            raise AuthApiError("Invalid JWT", status_code=401, code="bad_jwt") from exc

        subject = payload.get("sub")
        if not subject:
            raise AuthApiError("Invalid JWT", status_code=401, code="bad_jwt")

        users = AuthUserRow.__table__
        row = await asyncio.to_thread(self._find_user, users.c.id == subject)
        if row is None:
            raise AuthApiError("User from sub claim in JWT does not exist", status_code=403, code="user_not_found")
        return AuthUser(id=row["id"], email=row["email"])


class LocalBackend(Backend):
    """Table API over a SQLAlchemy engine, used for development and tests."""

    def __init__(self, engine: Engine, *, jwt_secret: str, token_minutes: int = 60) -> None:
        self.engine = engine
        self.auth = LocalAuthClient(self, jwt_secret=jwt_secret, token_minutes=token_minutes)

    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None or name in _PRIVATE_TABLES:
            raise BackendError(
                f"Could not find the table 'public.{name}' in the schema cache",
                status_code=404,
                code="PGRST205",
            )
        return table

    @staticmethod
    def _column(table: Table, name: str) -> Column:
        if name not in table.c:
            raise BackendError(
                f"Could not find the '{name}' column of '{table.name}' in the schema cache",
                status_code=400,
                code="PGRST204",
            )
        return table.c[name]

    @staticmethod
    def _coerce(column: Column, value: Any) -> Any:
        if value is not None and isinstance(value, str) and isinstance(column.type, DateTime):
            try:
                return datetime.fromisoformat(value)
            except ValueError as exc:
                raise BackendError(
                    f'invalid input syntax for type timestamp: "{value}"',
                    status_code=400,
                    code="22007",
                ) from exc
        return value

    def _where(self, table: Table, filters: list[Filter]) -> list[Any]:
        clauses = []
        for item in filters:
            column = self._column(table, item.column)
            if item.operator == "in":
                clauses.append(column.in_([self._coerce(column, value) for value in item.value]))
            elif item.value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == self._coerce(column, item.value))
        return clauses

    def _values(self, table: Table, payload: dict[str, Any]) -> dict[str, Any]:
        return {key: self._coerce(self._column(table, key), value) for key, value in payload.items()}

    @staticmethod
    def _resolve_foreign_key(table: Table, target: Table, hint: str | None) -> ForeignKey:
        candidates = [fk for fk in table.foreign_keys if fk.column.table is target]
        if hint:
            candidates = [fk for fk in candidates if hint in (fk.constraint.name, fk.parent.name)]
        if not candidates:
            raise BackendError(
                f"Could not find a relationship between '{table.name}' and '{target.name}' in the schema cache",
                status_code=400,
                code="PGRST200",
            )
        if len(candidates) > 1:
            raise BackendError(
                f"Could not embed because more than one relationship was found for '{table.name}' and '{target.name}'",
                status_code=300,
                code="PGRST201",
            )
        return candidates[0]

    def _shape(self, conn: Connection, table: Table, row: dict[str, Any], spec: SelectSpec) -> dict[str, Any]:
        if spec.include_all:
            shaped = _serialize_row(row)
        else:
            shaped = {name: _serialize(row[self._column(table, name).name]) for name in spec.columns}

        for embed in spec.embeds:
            target = self._table(embed.table)
            foreign_key = self._resolve_foreign_key(table, target, embed.hint)
            value = row[foreign_key.parent.name]
            related = None
            if value is not None:
                match = conn.execute(select(target).where(foreign_key.column == value)).mappings().first()
                if match is not None:
                    related = self._shape(conn, target, dict(match), embed.select)
            shaped[embed.alias] = related
        return shaped

    def _fetch_by_ids(self, conn: Connection, table: Table, ids: list[Any]) -> list[dict[str, Any]]:
        if not ids:
            return []
        rows = conn.execute(select(table).where(table.c.id.in_(ids))).mappings().all()
        by_id = {row["id"]: _serialize_row(dict(row)) for row in rows}
        return [by_id[row_id] for row_id in ids if row_id in by_id]

    def _adjust_post_counter(self, conn: Connection, table_name: str, row: dict[str, Any], delta: int) -> None:
        counter = _POST_COUNTERS.get(table_name)
        if counter is None:
            return
        fk_column, counter_column = counter
        posts = Base.metadata.tables["posts"]
        conn.execute(
            update(posts)
            .where(posts.c.id == row[fk_column])
            .values({counter_column: posts.c[counter_column] + delta})
        )

    def _run_select(self, conn: Connection, table: Table, query: TableQuery) -> list[dict[str, Any]]:
        try:
            spec = parse_select(query.columns)
        except ValueError as exc:
            raise BackendError(str(exc), status_code=400, code="PGRST100") from exc

        statement = select(table).where(*self._where(table, query.filters))
        for column_name, descending in query.ordering:
            column = self._column(table, column_name)
            statement = statement.order_by(column.desc() if descending else column.asc())
        if query.row_limit is not None:
            statement = statement.limit(query.row_limit)

        rows = conn.execute(statement).mappings().all()
        return [self._shape(conn, table, dict(row), spec) for row in rows]

    def _run_insert(self, conn: Connection, table: Table, query: TableQuery) -> list[dict[str, Any]]:
        ids: list[Any] = []
        for payload in query.payload or []:
            values = self._values(table, payload)
            values.setdefault("id", new_id())
            conn.execute(insert(table).values(**values))
            self._adjust_post_counter(conn, query.table, values, 1)
            ids.append(values["id"])
        return self._fetch_by_ids(conn, table, ids)

    def _run_update(self, conn: Connection, table: Table, query: TableQuery) -> list[dict[str, Any]]:
        values = self._values(table, query.payload or {})
        ids = list(conn.execute(select(table.c.id).where(*self._where(table, query.filters))).scalars().all())
        if ids and values:
            conn.execute(update(table).where(table.c.id.in_(ids)).values(**values))
        return self._fetch_by_ids(conn, table, ids)

    def _run_delete(self, conn: Connection, table: Table, query: TableQuery) -> list[dict[str, Any]]:
        rows = [dict(row) for row in conn.execute(select(table).where(*self._where(table, query.filters))).mappings()]
        if rows:
            conn.execute(delete(table).where(table.c.id.in_([row["id"] for row in rows])))
            for row in rows:
                self._adjust_post_counter(conn, query.table, row, -1)
        return [_serialize_row(row) for row in rows]

    def _execute_sync(self, query: TableQuery) -> list[dict[str, Any]]:
        table = self._table(query.table)
        handler = getattr(self, f"_run_{query.method}")
        with self.engine.begin() as conn:
            return handler(conn, table, query)

    def _count_sync(self, query: TableQuery) -> int:
        table = self._table(query.table)
        statement = select(func.count()).select_from(table).where(*self._where(table, query.filters))
        with self.engine.connect() as conn:
            return conn.execute(statement).scalar_one()

    async def _offload(self, work: Callable[[TableQuery], Any], query: TableQuery) -> Any:
        # Engine calls block, so they run in a worker thread
        try:
            return await asyncio.to_thread(work, query)
        except IntegrityError as exc:
            raise _integrity_error(exc) from exc
        except SQLAlchemyError as exc:
            logger.exception("Local backend %s on %s failed", query.method, query.table)
            raise BackendError("Local backend query failed", status_code=500) from exc

    async def execute_query(self, query: TableQuery) -> list[dict[str, Any]]:
        return await self._offload(self._execute_sync, query)

    async def count_query(self, query: TableQuery) -> int:
        return await self._offload(self._count_sync, query)


__all__ = ["LocalAuthClient", "LocalBackend", "create_local_engine", "init_local_schema"]
