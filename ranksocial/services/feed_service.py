"""Feed queries and the feed view state that refetches after every write."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable
from uuid import UUID

from ..clients import Backend, BackendError
from ..constants import EMPTY_FEED_MESSAGE, FEED_PAGE_SIZE
from ..schemas import Post
from . import post_service
from .session_service import SessionContext

logger = logging.getLogger(__name__)

FEED_SELECT = "*, author:profiles!posts_author_id_fkey(*, rank:ranks(*))"


async def _has_liked(backend: Backend, post_id: Any, viewer_id: UUID | str) -> bool:
    try:
        response = await (
            backend.table("likes")
            .select("id")
            .eq("post_id", post_id)
            .eq("user_id", viewer_id)
            .maybe_single()
            .execute()
        )
    except BackendError as exc:
        logger.warning("Like lookup failed for post %s: %s", post_id, exc.message)
        return False
    return response.data is not None


async def _liked_post_ids(backend: Backend, viewer_id: UUID | str, post_ids: Iterable[Any]) -> set[str]:
    ids = [str(post_id) for post_id in post_ids]
    if not ids:
        return set()
    try:
        response = await (
            backend.table("likes").select("post_id").eq("user_id", viewer_id).in_("post_id", ids).execute()
        )
    except BackendError as exc:
        logger.warning("Batched like lookup failed for %s: %s", viewer_id, exc.message)
        return set()
    return {str(row["post_id"]) for row in response.data or []}


async def fetch_feed(
    backend: Backend,
    viewer_id: UUID | str | None = None,
    *,
    limit: int = FEED_PAGE_SIZE,
    batch_like_lookup: bool = False,
) -> list[Post]:
    """Return the newest posts with author and rank, marking the ones the viewer liked.

    By default each post gets its own like lookup; ``batch_like_lookup``
    resolves the same set with a single query.
    """

    response = await (
        backend.table("posts").select(FEED_SELECT).order("created_at", desc=True).limit(limit).execute()
    )
    rows: list[dict[str, Any]] = response.data or []

    liked: set[str] = set()
    if viewer_id is not None and rows:
        if batch_like_lookup:
            liked = await _liked_post_ids(backend, viewer_id, (row["id"] for row in rows))
        else:
            flags = await asyncio.gather(*(_has_liked(backend, row["id"], viewer_id) for row in rows))
            liked = {str(row["id"]) for row, flag in zip(rows, flags) if flag}

    return [Post.model_validate({**row, "is_liked": str(row["id"]) in liked}) for row in rows]


class FeedView:
    """Feed state for one session: every successful write is followed by a full refetch."""

    def __init__(self, backend: Backend, session: SessionContext, *, batch_like_lookup: bool = False) -> None:
        self.backend = backend
        self.session = session
        self.batch_like_lookup = batch_like_lookup
        self.posts: list[Post] = []
        self.loading = False

    @property
    def viewer_id(self) -> UUID | None:
        return self.session.profile.id if self.session.profile else None

    @property
    def is_empty(self) -> bool:
        return not self.posts

    @property
    def empty_message(self) -> str | None:
        return EMPTY_FEED_MESSAGE if self.is_empty else None

    def find(self, post_id: UUID | str) -> Post | None:
        return next((post for post in self.posts if str(post.id) == str(post_id)), None)

    async def refresh(self) -> list[Post]:
        self.loading = True
        try:
            self.posts = await fetch_feed(
                self.backend,
                self.viewer_id,
                batch_like_lookup=self.batch_like_lookup,
            )
        except BackendError as exc:
            # Keep showing the previous posts
            logger.warning("Feed refresh failed: %s", exc.message)
        finally:
            self.loading = False
        return self.posts

    async def create_post(self, content: str) -> bool:
        if self.viewer_id is None:
            return False
        created = await post_service.create_post(self.backend, author_id=self.viewer_id, content=content)
        if created:
            await self.refresh()
        return created

    async def toggle_like(self, post_id: UUID | str, *, is_liked: bool) -> bool:
        if self.viewer_id is None:
            return False
        toggled = await post_service.toggle_like(
            self.backend,
            post_id=post_id,
            user_id=self.viewer_id,
            is_liked=is_liked,
        )
        if toggled:
            await self.refresh()
        return toggled

    async def add_comment(self, post_id: UUID | str, content: str) -> bool:
        if self.viewer_id is None:
            return False
        created = await post_service.create_comment(
            self.backend,
            post_id=post_id,
            author_id=self.viewer_id,
            content=content,
        )
        if created:
            await self.refresh()
        return created


__all__ = ["FEED_SELECT", "FeedView", "fetch_feed"]
