"""
DevNote Backend - User and Auth Schemas
=======================================

What:  Registration/login bodies, token response, profile payloads and the
       privacy settings contract.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from devnote.schemas.common import UTCDateTime

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


class RegisterRequest(BaseModel):
    """
    Body of POST /api/auth/register.

    Password length and confirmation are enforced by UserService so the
    minimum length follows `settings.password_min_length`.
    """

    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)
    confirm_password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        return v.strip()


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")


class UserSummary(BaseModel):
    """Compact user card used in follower lists and post bylines."""

    id: int
    username: str
    display_name: Optional[str] = None
    avatar: Optional[str] = None

    model_config = {"from_attributes": True}


class PrivacySettings(BaseModel):
    """Body of PUT /api/users/{username}/privacy and part of the profile."""

    show_followers: bool = True
    show_following: bool = True
    show_likes: bool = True
    show_favorites: bool = True

    model_config = {"from_attributes": True}


class ProfileCounts(BaseModel):
    posts: int = Field(description="Posts the viewer can see on this profile")
    followers: int
    following: int
    liked_posts: int
    favorited_posts: int


class ProfileResponse(BaseModel):
    """
    GET /api/users/{username}.

    `is_self` drives owner-only UI (edit button, privacy page).
    `is_following` is always false for self and anonymous viewers.
    """

    id: int
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    created_at: UTCDateTime
    privacy: PrivacySettings
    counts: ProfileCounts
    is_self: bool
    is_following: bool


class RegisteredUser(UserSummary):
    email: str
    created_at: UTCDateTime
