"""Aggregate router exports."""
from .admin import router as admin_router
from .auth import router as auth_router
from .follows import router as follows_router
from .posts import router as posts_router

__all__ = [
    "admin_router",
    "auth_router",
    "follows_router",
    "posts_router",
]
