"""Feed, post, like and comment API routes."""
from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from ..clients import BackendError
from ..config import get_settings
from ..formatting import format_relative_time
from ..schemas import (
    CommentCreate,
    CommentListResponse,
    FeedMutationResponse,
    FeedResponse,
    LikeToggleRequest,
    PostCreate,
    PostResponse,
)
from ..services import (
    ContentValidationError,
    FeedView,
    SessionContext,
    get_session_context,
    list_comments,
    require_profile,
)

router = APIRouter(prefix="/posts", tags=["posts"])


def _feed_view(context: SessionContext) -> FeedView:
    return FeedView(context.backend, context, batch_like_lookup=get_settings().feed_batch_likes)


def _to_feed_response(view: FeedView) -> FeedResponse:
    now = datetime.now(timezone.utc)
    items = [
        PostResponse(**post.model_dump(), created_ago=format_relative_time(post.created_at, now))
        for post in view.posts
    ]
    return FeedResponse(items=items, empty_message=view.empty_message)


def _mutation_response(view: FeedView, applied: bool) -> FeedMutationResponse:
    return FeedMutationResponse(applied=applied, feed=_to_feed_response(view) if applied else None)


@router.get("/feed", response_model=FeedResponse)
async def feed_endpoint(context: SessionContext = Depends(get_session_context)) -> FeedResponse:
    view = _feed_view(context)
    await view.refresh()
    return _to_feed_response(view)


@router.post("", response_model=FeedMutationResponse)
async def create_post_endpoint(
    payload: PostCreate,
    context: SessionContext = Depends(require_profile),
) -> FeedMutationResponse:
    view = _feed_view(context)
    try:
        applied = await view.create_post(payload.content)
    except ContentValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message) from exc
    return _mutation_response(view, applied)


@router.post("/{post_id}/like", response_model=FeedMutationResponse)
async def toggle_like_endpoint(
    post_id: UUID,
    payload: LikeToggleRequest,
    context: SessionContext = Depends(require_profile),
) -> FeedMutationResponse:
    view = _feed_view(context)
    applied = await view.toggle_like(post_id, is_liked=payload.is_liked)
    return _mutation_response(view, applied)


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def list_comments_endpoint(
    post_id: UUID,
    context: SessionContext = Depends(get_session_context),
) -> CommentListResponse:
    try:
        comments = await list_comments(context.backend, post_id=post_id)
    except BackendError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    return CommentListResponse(items=comments)


@router.post("/{post_id}/comments", response_model=FeedMutationResponse)
async def create_comment_endpoint(
    post_id: UUID,
    payload: CommentCreate,
    context: SessionContext = Depends(require_profile),
) -> FeedMutationResponse:
    view = _feed_view(context)
    try:
        applied = await view.add_comment(post_id, payload.content)
    except ContentValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message) from exc
    return _mutation_response(view, applied)
