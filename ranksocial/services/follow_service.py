"""Business logic for follower relationships."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from ..clients import Backend, BackendError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FollowStats:
    profile_id: UUID
    followers_count: int
    following_count: int
    is_following: bool


class FollowError(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProfileNotFoundError(LookupError):
    def __init__(self, profile_id: UUID | str) -> None:
        super().__init__(f"Profile {profile_id} not found")
        self.message = "Profile not found"


async def _require_profile(backend: Backend, profile_id: UUID | str) -> None:
    response = await backend.table("profiles").select("id").eq("id", profile_id).maybe_single().execute()
    if response.data is None:
        raise ProfileNotFoundError(profile_id)


async def _existing_follow(backend: Backend, follower_id: UUID | str, target_id: UUID | str) -> dict | None:
    response = await (
        backend.table("follows")
        .select("id")
        .eq("follower_id", follower_id)
        .eq("following_id", target_id)
        .maybe_single()
        .execute()
    )
    return response.data


async def _count_follows(backend: Backend, column: str, profile_id: UUID | str) -> int:
    response = await backend.table("follows").select("id", count="exact", head=True).eq(column, profile_id).execute()
    return response.count or 0


async def follow_user(backend: Backend, *, follower_id: UUID | str, target_id: UUID | str) -> bool:
    """Follow ``target_id``; returns False when the relationship already existed."""

    if str(follower_id) == str(target_id):
        raise FollowError("Cannot follow yourself")

    await _require_profile(backend, target_id)

    if await _existing_follow(backend, follower_id, target_id) is not None:
        return False
    try:
        await backend.table("follows").insert({"follower_id": follower_id, "following_id": target_id}).execute()
    except BackendError as exc:
        logger.warning("Failed to follow %s: %s", target_id, exc.message)
        return False
    return True


async def unfollow_user(backend: Backend, *, follower_id: UUID | str, target_id: UUID | str) -> bool:
    if str(follower_id) == str(target_id):
        return False
    try:
        response = await (
            backend.table("follows").delete().eq("follower_id", follower_id).eq("following_id", target_id).execute()
        )
    except BackendError as exc:
        logger.warning("Failed to unfollow %s: %s", target_id, exc.message)
        return False
    return bool(response.data)


async def get_follow_stats(
    backend: Backend,
    *,
    profile_id: UUID | str,
    viewer_id: UUID | str | None = None,
) -> FollowStats:
    await _require_profile(backend, profile_id)

    is_following = False
    if viewer_id is not None and str(viewer_id) != str(profile_id):
        is_following = await _existing_follow(backend, viewer_id, profile_id) is not None

    return FollowStats(
        profile_id=UUID(str(profile_id)),
        followers_count=await _count_follows(backend, "following_id", profile_id),
        following_count=await _count_follows(backend, "follower_id", profile_id),
        is_following=is_following,
    )


__all__ = [
    "FollowError",
    "FollowStats",
    "ProfileNotFoundError",
    "follow_user",
    "unfollow_user",
    "get_follow_stats",
]
