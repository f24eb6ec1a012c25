"""Convenience exports for schema layer."""
from .admin import AdminDataResponse, AdminMutationResponse
from .auth import SessionResponse, SignInRequest, SignUpRequest
from .follow import FollowActionResponse, FollowStatsResponse
from .posts import (
    Comment,
    CommentCreate,
    CommentListResponse,
    FeedMutationResponse,
    FeedResponse,
    Like,
    LikeToggleRequest,
    Post,
    PostCreate,
    PostResponse,
)
from .profiles import Profile, ProfileFlagToggle, ProfileRankUpdate
from .ranks import Rank, RankCreate

__all__ = [
    "AdminDataResponse",
    "AdminMutationResponse",
    "SessionResponse",
    "SignInRequest",
    "SignUpRequest",
    "FollowActionResponse",
    "FollowStatsResponse",
    "Comment",
    "CommentCreate",
    "CommentListResponse",
    "FeedMutationResponse",
    "FeedResponse",
    "Like",
    "LikeToggleRequest",
    "Post",
    "PostCreate",
    "PostResponse",
    "Profile",
    "ProfileFlagToggle",
    "ProfileRankUpdate",
    "Rank",
    "RankCreate",
]
