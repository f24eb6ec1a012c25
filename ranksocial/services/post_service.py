"""Write operations on posts, likes and comments.

Every mutator returns ``True`` once the backend accepted the write so the
caller can refetch the feed. Remote failures are logged and reported as
``False``; nothing is retried and nothing is patched locally.
"""
from __future__ import annotations

import logging
from uuid import UUID

from ..clients import Backend, BackendError
from ..constants import POST_MAX_LENGTH
from ..schemas import Comment

logger = logging.getLogger(__name__)

COMMENT_SELECT = "*, author:profiles!comments_author_id_fkey(*, rank:ranks(*))"


class ContentValidationError(ValueError):
    """Raised before any network call when user input is not acceptable."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def can_submit_post(content: str) -> bool:
    """Whether the compose form should allow submitting ``content``."""

    return bool(content.strip()) and len(content) <= POST_MAX_LENGTH


def validate_post_content(content: str) -> str:
    text = (content or "").strip()
    if not text:
        raise ContentValidationError("Post cannot be empty")
    if len(content) > POST_MAX_LENGTH:
        raise ContentValidationError(f"Post cannot be longer than {POST_MAX_LENGTH} characters")
    return text


async def create_post(backend: Backend, *, author_id: UUID | str, content: str) -> bool:
    text = validate_post_content(content)
    try:
        await backend.table("posts").insert({"author_id": author_id, "content": text}).execute()
    except BackendError as exc:
        logger.warning("Failed to create post for %s: %s", author_id, exc.message)
        return False
    return True


async def toggle_like(backend: Backend, *, post_id: UUID | str, user_id: UUID | str, is_liked: bool) -> bool:
    """Flip the like state the viewer saw when clicking.

    ``is_liked`` is the displayed flag, which may be stale until the next
    refetch. A stale ``False`` inserts a duplicate that the backend's unique
    constraint rejects (reported as ``False``); a stale ``True`` deletes
    nothing and still reports ``True``.
    """

    likes = backend.table("likes")
    try:
        if is_liked:
            await likes.delete().eq("post_id", post_id).eq("user_id", user_id).execute()
        else:
            await likes.insert({"post_id": post_id, "user_id": user_id}).execute()
    except BackendError as exc:
        logger.warning("Failed to toggle like on post %s: %s", post_id, exc.message)
        return False
    return True


async def create_comment(backend: Backend, *, post_id: UUID | str, author_id: UUID | str, content: str) -> bool:
    text = (content or "").strip()
    if not text:
        raise ContentValidationError("Comment cannot be empty")
    try:
        await (
            backend.table("comments")
            .insert({"post_id": post_id, "author_id": author_id, "content": text})
            .execute()
        )
    except BackendError as exc:
        logger.warning("Failed to add comment to post %s: %s", post_id, exc.message)
        return False
    return True


async def list_comments(backend: Backend, *, post_id: UUID | str) -> list[Comment]:
    response = await (
        backend.table("comments")
        .select(COMMENT_SELECT)
        .eq("post_id", post_id)
        .order("created_at")
        .execute()
    )
    return [Comment.model_validate(row) for row in response.data or []]


__all__ = [
    "ContentValidationError",
    "can_submit_post",
    "validate_post_content",
    "create_post",
    "toggle_like",
    "create_comment",
    "list_comments",
]
