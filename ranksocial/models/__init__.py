"""Convenience exports for the local backend ORM models."""
from .auth_user import AuthUser
from .base import Base
from .follow import Follow
from .post import Comment, Like, Post
from .profile import Profile
from .rank import Rank

__all__ = [
    "AuthUser",
    "Base",
    "Comment",
    "Follow",
    "Like",
    "Post",
    "Profile",
    "Rank",
]
