"""Pydantic schemas for posts, comments and likes."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, field_validator

from .profiles import Profile


class Post(BaseModel):
    id: UUID
    author_id: UUID
    content: str
    media_url: str = ""
    likes_count: int = 0
    comments_count: int = 0
    created_at: datetime
    author: Profile | None = None
    # Transient: whether the viewer liked the post at fetch time
    is_liked: bool = False

    @field_validator("media_url", mode="before")
    def blank_when_null(cls, v):
        return "" if v is None else v


class Comment(BaseModel):
    id: UUID
    post_id: UUID
    author_id: UUID
    content: str
    created_at: datetime
    author: Profile | None = None


class Like(BaseModel):
    id: UUID
    post_id: UUID
    user_id: UUID
    created_at: datetime


class PostCreate(BaseModel):
    content: str


class CommentCreate(BaseModel):
    content: str


class LikeToggleRequest(BaseModel):
    """``is_liked`` is the state the client displayed when the user clicked."""

    is_liked: bool


class PostResponse(Post):
    created_ago: str


class FeedResponse(BaseModel):
    items: list[PostResponse]
    empty_message: str | None = None


class FeedMutationResponse(BaseModel):
    """``feed`` holds the refetched feed when ``applied``; otherwise the client keeps its state."""

    applied: bool
    feed: FeedResponse | None = None


class CommentListResponse(BaseModel):
    items: list[Comment]


__all__ = [
    "Post",
    "Comment",
    "Like",
    "PostCreate",
    "CommentCreate",
    "LikeToggleRequest",
    "PostResponse",
    "FeedResponse",
    "FeedMutationResponse",
    "CommentListResponse",
]
