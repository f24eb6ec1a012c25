"""Project-wide constant values."""
from __future__ import annotations

FEED_PAGE_SIZE = 50
POST_MAX_LENGTH = 500
PASSWORD_MIN_LENGTH = 6

# Ranks at or above this priority unlock the admin panel
OWNER_RANK_PRIORITY = 1000
PREMIUM_PERIOD_DAYS = 30
DEFAULT_RANK_COLOR = "#6B7280"

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
PASSWORD_MISMATCH_MESSAGE = "Password and confirmation do not match."
PASSWORD_TOO_SHORT_MESSAGE = f"Password must be at least {PASSWORD_MIN_LENGTH} characters."
EMPTY_FEED_MESSAGE = "No posts yet. Be the first to share something!"
ACCESS_DENIED_MESSAGE = "Only the site owner can access this section."

__all__ = [
    "FEED_PAGE_SIZE",
    "POST_MAX_LENGTH",
    "PASSWORD_MIN_LENGTH",
    "OWNER_RANK_PRIORITY",
    "PREMIUM_PERIOD_DAYS",
    "DEFAULT_RANK_COLOR",
    "GENERIC_ERROR_MESSAGE",
    "PASSWORD_MISMATCH_MESSAGE",
    "PASSWORD_TOO_SHORT_MESSAGE",
    "EMPTY_FEED_MESSAGE",
    "ACCESS_DENIED_MESSAGE",
]
