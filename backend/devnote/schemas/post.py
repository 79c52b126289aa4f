"""
DevNote Backend - Post and Engagement Schemas
=============================================
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from devnote.policy.visibility import DEFAULT_POST_VISIBILITY, PostVisibility
from devnote.schemas.common import UTCDateTime
from devnote.schemas.user import UserSummary


class PostCreateRequest(BaseModel):
    """Body of POST /api/posts. Title and content must not be blank."""

    title: str = Field(max_length=100)
    content: str
    visibility: PostVisibility = DEFAULT_POST_VISIBILITY

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class VisibilityUpdateRequest(BaseModel):
    visibility: PostVisibility


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    visibility: PostVisibility
    author: UserSummary
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None

    model_config = {"from_attributes": True}


class PostDetail(PostResponse):
    """GET /api/posts/{id}: the post plus engagement totals and the viewer's own state."""

    like_count: int = 0
    favorite_count: int = 0
    liked_by_me: bool = False
    favorited_by_me: bool = False


class PostSummary(BaseModel):
    """List item for profile, liked and favorited post pages."""

    id: int
    title: str
    visibility: PostVisibility
    author_username: str
    created_at: UTCDateTime


class EngagementStatus(BaseModel):
    """Result of a like/favorite toggle: the viewer's state after the call."""

    post_id: int
    active: bool = Field(description="Whether the viewer now likes/favorites the post")
    count: int = Field(description="Total likes/favorites on the post")


class FollowStatus(BaseModel):
    username: str
    following: bool
    followers_count: int
