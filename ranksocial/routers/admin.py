"""Owner-only admin API routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from ..constants import ACCESS_DENIED_MESSAGE
from ..schemas import AdminDataResponse, AdminMutationResponse, ProfileFlagToggle, ProfileRankUpdate, RankCreate
from ..services import AdminPanel, ContentValidationError, SessionContext, require_session

router = APIRouter(prefix="/admin", tags=["admin"])


async def get_admin_panel(context: SessionContext = Depends(require_session)) -> AdminPanel:
    """Build the admin panel for the caller, refusing non-owners before any admin query."""

    panel = AdminPanel(context.backend, context)
    if not panel.is_owner:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED_MESSAGE)
    return panel


def _to_data(panel: AdminPanel) -> AdminDataResponse:
    return AdminDataResponse(users=panel.users, ranks=panel.ranks)


@router.get("", response_model=AdminDataResponse)
async def admin_data_endpoint(panel: AdminPanel = Depends(get_admin_panel)) -> AdminDataResponse:
    if await panel.load() is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load admin data")
    return _to_data(panel)


@router.post("/ranks", response_model=AdminMutationResponse)
async def create_rank_endpoint(
    payload: RankCreate,
    panel: AdminPanel = Depends(get_admin_panel),
) -> AdminMutationResponse:
    try:
        applied = await panel.create_rank(payload.name, payload.color, payload.priority)
    except ContentValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message) from exc
    return AdminMutationResponse(applied=applied, data=_to_data(panel) if applied else None)


@router.patch("/users/{profile_id}/rank", response_model=AdminMutationResponse)
async def set_rank_endpoint(
    profile_id: UUID,
    payload: ProfileRankUpdate,
    panel: AdminPanel = Depends(get_admin_panel),
) -> AdminMutationResponse:
    applied = await panel.set_user_rank(profile_id, payload.rank_id)
    return AdminMutationResponse(applied=applied, data=_to_data(panel))


@router.post("/users/{profile_id}/verified", response_model=AdminMutationResponse)
async def toggle_verified_endpoint(
    profile_id: UUID,
    payload: ProfileFlagToggle,
    panel: AdminPanel = Depends(get_admin_panel),
) -> AdminMutationResponse:
    applied = await panel.set_verified(profile_id, payload.current)
    return AdminMutationResponse(applied=applied, data=_to_data(panel))


@router.post("/users/{profile_id}/premium", response_model=AdminMutationResponse)
async def toggle_premium_endpoint(
    profile_id: UUID,
    payload: ProfileFlagToggle,
    panel: AdminPanel = Depends(get_admin_panel),
) -> AdminMutationResponse:
    applied = await panel.set_premium(profile_id, payload.current)
    return AdminMutationResponse(applied=applied, data=_to_data(panel))
