"""SQLAlchemy ORM models for posts and their engagement rows."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from .base import Base, new_id, utcnow


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=new_id)
    author_id = Column(
        String(36), ForeignKey("profiles.id", name="posts_author_id_fkey", ondelete="CASCADE"), nullable=False, index=True
    )
    content = Column(Text, nullable=False)
    media_url = Column(String(1024), nullable=False, default="")
    likes_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=new_id)
    post_id = Column(
        String(36), ForeignKey("posts.id", name="comments_post_id_fkey", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id = Column(
        String(36), ForeignKey("profiles.id", name="comments_author_id_fkey", ondelete="CASCADE"), nullable=False
    )
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Like(Base):
    __tablename__ = "likes"

    id = Column(String(36), primary_key=True, default=new_id)
    post_id = Column(
        String(36), ForeignKey("posts.id", name="likes_post_id_fkey", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(
        String(36), ForeignKey("profiles.id", name="likes_user_id_fkey", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("post_id", "user_id", name="likes_post_id_user_id_key"),)


__all__ = ["Post", "Comment", "Like"]
