"""Resolution of the backend credentials: ``BACKEND_ANON_KEY`` for the hosted API
and ``JWT_SECRET_KEY`` for tokens signed by the local backend."""
from __future__ import annotations

import os
from typing import Final

__all__ = ["MissingSecretError", "require_secret", "is_placeholder"]


class MissingSecretError(RuntimeError):
    """Raised when the active backend mode lacks its credential."""


# Values shipped in sample .env files for the anon key and signing secret
_PLACEHOLDER_VALUES: Final[frozenset[str]] = frozenset(
    {
        "changeme",
        "change-me",
        "your-anon-key",
        "your-jwt-secret",
        "anon-key-here",
        "super-secret-jwt-token",
    }
)


def is_placeholder(value: str | None) -> bool:
    return not value or not value.strip() or value.strip().lower() in _PLACEHOLDER_VALUES


def require_secret(name: str, value: str | None = None) -> str:
    """Return the credential ``name`` trimmed, preferring an already-resolved ``value``.

    ``create_backend`` passes ``settings.backend_anon_key`` for ``BACKEND_ANON_KEY``;
    ``JWT_SECRET_KEY`` is read from the environment.
    """

    candidate = value if value is not None else os.getenv(name)
    if is_placeholder(candidate):
        mode = "rest" if name == "BACKEND_ANON_KEY" else "local"
        raise MissingSecretError(f"{name} must be set to a real value when BACKEND_MODE={mode}")
    return candidate.strip()
