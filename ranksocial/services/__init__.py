"""Service layer exports."""
from .admin_service import (
    AccessDeniedError,
    AdminData,
    AdminPanel,
    create_rank,
    fetch_admin_data,
    is_owner,
    set_premium,
    set_user_rank,
    set_verified,
)
from .feed_service import FEED_SELECT, FeedView, fetch_feed
from .follow_service import (
    FollowError,
    FollowStats,
    ProfileNotFoundError,
    follow_user,
    get_follow_stats,
    unfollow_user,
)
from .post_service import (
    ContentValidationError,
    can_submit_post,
    create_comment,
    create_post,
    list_comments,
    toggle_like,
    validate_post_content,
)
from .session_service import (
    PROFILE_SELECT,
    SessionContext,
    SessionError,
    get_session_context,
    require_profile,
    require_session,
    validate_sign_up,
)

__all__ = [
    "AccessDeniedError",
    "AdminData",
    "AdminPanel",
    "create_rank",
    "fetch_admin_data",
    "is_owner",
    "set_premium",
    "set_user_rank",
    "set_verified",
    "FEED_SELECT",
    "FeedView",
    "fetch_feed",
    "FollowError",
    "FollowStats",
    "ProfileNotFoundError",
    "follow_user",
    "get_follow_stats",
    "unfollow_user",
    "ContentValidationError",
    "can_submit_post",
    "create_comment",
    "create_post",
    "list_comments",
    "toggle_like",
    "validate_post_content",
    "PROFILE_SELECT",
    "SessionContext",
    "SessionError",
    "get_session_context",
    "require_profile",
    "require_session",
    "validate_sign_up",
]
