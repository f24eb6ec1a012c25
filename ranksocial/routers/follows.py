"""Follow management API routes."""
from __future__ import annotations

from dataclasses import asdict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from ..clients import BackendError
from ..schemas import FollowActionResponse, FollowStatsResponse
from ..services import (
    FollowError,
    ProfileNotFoundError,
    SessionContext,
    follow_user,
    get_follow_stats,
    get_session_context,
    require_profile,
    unfollow_user,
)

router = APIRouter(prefix="/profiles", tags=["follows"])


@router.post("/{profile_id}/follow", response_model=FollowActionResponse, status_code=status.HTTP_201_CREATED)
async def follow_endpoint(
    profile_id: UUID,
    context: SessionContext = Depends(require_profile),
) -> FollowActionResponse:
    viewer_id = context.profile.id
    try:
        changed = await follow_user(context.backend, follower_id=viewer_id, target_id=profile_id)
        stats = await get_follow_stats(context.backend, profile_id=profile_id, viewer_id=viewer_id)
    except FollowError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except ProfileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except BackendError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    payload = asdict(stats)
    payload["status"] = "followed" if changed else "noop"
    return FollowActionResponse(**payload)


@router.delete("/{profile_id}/follow", response_model=FollowActionResponse)
async def unfollow_endpoint(
    profile_id: UUID,
    context: SessionContext = Depends(require_profile),
) -> FollowActionResponse:
    viewer_id = context.profile.id
    try:
        changed = await unfollow_user(context.backend, follower_id=viewer_id, target_id=profile_id)
        stats = await get_follow_stats(context.backend, profile_id=profile_id, viewer_id=viewer_id)
    except ProfileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except BackendError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    payload = asdict(stats)
    payload["status"] = "unfollowed" if changed else "noop"
    return FollowActionResponse(**payload)


@router.get("/{profile_id}/follow-stats", response_model=FollowStatsResponse)
async def follow_stats_endpoint(
    profile_id: UUID,
    context: SessionContext = Depends(get_session_context),
) -> FollowStatsResponse:
    viewer_id = context.profile.id if context.profile else None
    try:
        stats = await get_follow_stats(context.backend, profile_id=profile_id, viewer_id=viewer_id)
    except ProfileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except BackendError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    return FollowStatsResponse(**asdict(stats))
