"""Backend clients: the hosted REST API and the local SQLAlchemy stand-in."""
from .base import (
    AuthApiError,
    AuthClient,
    AuthResponse,
    AuthSession,
    AuthUser,
    Backend,
    BackendConnectionError,
    BackendError,
    BackendResponse,
    TableQuery,
)
from .local import LocalBackend, create_local_engine, init_local_schema
from .rest import RestBackend

__all__ = [
    "AuthApiError",
    "AuthClient",
    "AuthResponse",
    "AuthSession",
    "AuthUser",
    "Backend",
    "BackendConnectionError",
    "BackendError",
    "BackendResponse",
    "LocalBackend",
    "RestBackend",
    "TableQuery",
    "create_local_engine",
    "init_local_schema",
]
