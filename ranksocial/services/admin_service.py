"""Owner-only queries and updates over profiles and ranks.

``is_owner`` only gates what the client shows and calls. The backend's own
access rules decide whether a write is actually allowed.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from ..clients import Backend, BackendError
from ..constants import ACCESS_DENIED_MESSAGE, DEFAULT_RANK_COLOR, OWNER_RANK_PRIORITY, PREMIUM_PERIOD_DAYS
from ..schemas import Profile, Rank
from .post_service import ContentValidationError
from .session_service import PROFILE_SELECT, SessionContext

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class AccessDeniedError(PermissionError):
    """Raised when a non-owner reaches for an admin operation."""

    def __init__(self, message: str = ACCESS_DENIED_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


@dataclass(slots=True)
class AdminData:
    users: list[Profile] = field(default_factory=list)
    ranks: list[Rank] = field(default_factory=list)


def is_owner(profile: Profile | None) -> bool:
    """Whether ``profile`` holds a rank with owner-level priority."""

    if profile is None or profile.rank is None:
        return False
    return profile.rank.priority >= OWNER_RANK_PRIORITY


async def fetch_admin_data(backend: Backend) -> AdminData:
    """Load all profiles (newest first) and all ranks (highest priority first) concurrently."""

    users_response, ranks_response = await asyncio.gather(
        backend.table("profiles").select(PROFILE_SELECT).order("created_at", desc=True).execute(),
        backend.table("ranks").select("*").order("priority", desc=True).execute(),
    )
    return AdminData(
        users=[Profile.model_validate(row) for row in users_response.data or []],
        ranks=[Rank.model_validate(row) for row in ranks_response.data or []],
    )


async def create_rank(backend: Backend, *, name: str, color: str = DEFAULT_RANK_COLOR, priority: int = 0) -> bool:
    if not (name or "").strip():
        raise ContentValidationError("Rank name cannot be empty")
    if not _HEX_COLOR.match(color or ""):
        raise ContentValidationError("Rank color must be a hex value like #6B7280")
    try:
        await backend.table("ranks").insert({"name": name, "color": color, "priority": int(priority)}).execute()
    except BackendError as exc:
        logger.warning("Failed to create rank %r: %s", name, exc.message)
        return False
    return True


async def _patch_profile(backend: Backend, profile_id: UUID | str, values: dict[str, Any]) -> bool:
    try:
        await backend.table("profiles").update(values).eq("id", profile_id).execute()
    except BackendError as exc:
        logger.warning("Failed to update profile %s: %s", profile_id, exc.message)
        return False
    return True


async def set_user_rank(backend: Backend, *, profile_id: UUID | str, rank_id: UUID | str | None) -> bool:
    return await _patch_profile(backend, profile_id, {"rank_id": rank_id})


async def set_verified(backend: Backend, *, profile_id: UUID | str, current: bool) -> bool:
    return await _patch_profile(backend, profile_id, {"is_verified": not current})


async def set_premium(
    backend: Backend,
    *,
    profile_id: UUID | str,
    current: bool,
    now: datetime | None = None,
) -> bool:
    """Flip premium; switching it on grants a fixed period, switching it off clears the expiry."""

    premium_until = None
    if not current:
        premium_until = (now or datetime.now(timezone.utc)) + timedelta(days=PREMIUM_PERIOD_DAYS)
    return await _patch_profile(backend, profile_id, {"is_premium": not current, "premium_until": premium_until})


class AdminPanel:
    """Admin view state; each mutation is followed by a reload of profiles and ranks."""

    def __init__(self, backend: Backend, session: SessionContext) -> None:
        self.backend = backend
        self.session = session
        self.users: list[Profile] = []
        self.ranks: list[Rank] = []
        self.loading = False
        self.denied = False

    @property
    def is_owner(self) -> bool:
        return is_owner(self.session.profile)

    def _require_owner(self) -> None:
        if not self.is_owner:
            self.denied = True
            raise AccessDeniedError()

    async def load(self) -> AdminData | None:
        if not self.is_owner:
            self.denied = True
            return None
        self.denied = False
        self.loading = True
        try:
            data = await fetch_admin_data(self.backend)
        except BackendError as exc:
            logger.warning("Admin data refresh failed: %s", exc.message)
            return None
        finally:
            self.loading = False
        self.users, self.ranks = data.users, data.ranks
        return data

    async def create_rank(self, name: str, color: str = DEFAULT_RANK_COLOR, priority: int = 0) -> bool:
        self._require_owner()
        created = await create_rank(self.backend, name=name, color=color, priority=priority)
        if created:
            await self.load()
        return created

    async def set_user_rank(self, profile_id: UUID | str, rank_id: UUID | str | None) -> bool:
        self._require_owner()
        applied = await set_user_rank(self.backend, profile_id=profile_id, rank_id=rank_id)
        await self.load()
        return applied

    async def set_verified(self, profile_id: UUID | str, current: bool) -> bool:
        self._require_owner()
        applied = await set_verified(self.backend, profile_id=profile_id, current=current)
        await self.load()
        return applied

    async def set_premium(self, profile_id: UUID | str, current: bool) -> bool:
        self._require_owner()
        applied = await set_premium(self.backend, profile_id=profile_id, current=current)
        await self.load()
        return applied


__all__ = [
    "AccessDeniedError",
    "AdminData",
    "AdminPanel",
    "create_rank",
    "fetch_admin_data",
    "is_owner",
    "set_premium",
    "set_user_rank",
    "set_verified",
]
