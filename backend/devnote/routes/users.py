"""
DevNote Backend - User Profile Routes
=====================================

What:  Profile page, profile edits, privacy settings, follow/unfollow, and
       the four per-profile lists plus the profile post listing.
Who:   Called by the profile page and its tabs.

Access summary:
    GET  /api/users/{u}                    anyone
    PATCH /api/users/{u}                   owner
    PUT  /api/users/{u}/privacy            owner
    GET  /api/users/{u}/posts              anyone, filtered by visibility
    GET  /api/users/{u}/followers           gated by show_followers
    GET  /api/users/{u}/following           gated by show_following
    GET  /api/users/{u}/liked-posts         gated by show_likes
    GET  /api/users/{u}/favorited-posts     gated by show_favorites
    POST/DELETE /api/users/{u}/follow       authenticated
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.config import settings
from devnote.database import get_db_session
from devnote.dependencies import get_viewer, require_viewer
from devnote.policy.visibility import Viewer
from devnote.schemas.common import ErrorResponse, Page
from devnote.schemas.post import FollowStatus, PostSummary
from devnote.schemas.user import PrivacySettings, ProfileResponse, UserSummary
from devnote.services.follow_service import follow_service
from devnote.services.post_service import post_service
from devnote.services.profile_service import profile_service
from devnote.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

MAX_PAGE_SIZE = 100

GATED_RESPONSES = {
    403: {"description": "List is private to its owner", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
}


def _paged(response: Response, page: Page) -> Page:
    response.headers["X-Total-Count"] = str(page.total_elements)
    return page


# ── Profile ───────────────────────────────────────────────────────────────


@router.get(
    "/{username}",
    response_model=ProfileResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Profile page data",
)
async def get_profile(
    username: str,
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.get_profile(db, viewer, username)


@router.patch(
    "/{username}",
    response_model=ProfileResponse,
    responses={
        400: {"description": "Invalid field or avatar", "model": ErrorResponse},
        403: {"description": "Not your profile", "model": ErrorResponse},
    },
    summary="Edit display name, bio and avatar",
)
async def update_profile(
    username: str,
    display_name: Optional[str] = Form(default=None),
    bio: Optional[str] = Form(default=None),
    avatar: Optional[UploadFile] = File(default=None),
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    avatar_content = None
    avatar_filename = None
    avatar_size = None
    if avatar is not None and avatar.filename:
        avatar_content = await avatar.read()
        avatar_filename = avatar.filename
        avatar_size = avatar.size

    await user_service.update_profile(
        db,
        viewer,
        username,
        display_name=display_name,
        bio=bio,
        avatar_filename=avatar_filename,
        avatar_content=avatar_content,
        avatar_content_length=avatar_size,
    )
    return await profile_service.get_profile(db, viewer, username)


@router.put(
    "/{username}/privacy",
    response_model=PrivacySettings,
    responses={403: {"description": "Not your profile", "model": ErrorResponse}},
    summary="Replace the four privacy flags",
)
async def update_privacy(
    username: str,
    body: PrivacySettings,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> PrivacySettings:
    return await user_service.update_privacy_settings(db, viewer, username, body)


# ── Lists ─────────────────────────────────────────────────────────────────


@router.get(
    "/{username}/posts",
    response_model=Page[PostSummary],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Posts on a profile, filtered to what the viewer may see",
)
async def list_posts(
    response: Response,
    username: str,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=settings.posts_page_size, ge=1, le=MAX_PAGE_SIZE),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> Page[PostSummary]:
    return _paged(response, await post_service.list_profile_posts(db, viewer, username, page, size))


@router.get(
    "/{username}/followers",
    response_model=Page[UserSummary],
    responses=GATED_RESPONSES,
    summary="Users following this profile",
)
async def list_followers(
    response: Response,
    username: str,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=settings.relations_page_size, ge=1, le=MAX_PAGE_SIZE),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserSummary]:
    return _paged(response, await follow_service.list_followers(db, viewer, username, page, size))


@router.get(
    "/{username}/following",
    response_model=Page[UserSummary],
    responses=GATED_RESPONSES,
    summary="Users this profile follows",
)
async def list_following(
    response: Response,
    username: str,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=settings.relations_page_size, ge=1, le=MAX_PAGE_SIZE),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserSummary]:
    return _paged(response, await follow_service.list_following(db, viewer, username, page, size))


@router.get(
    "/{username}/liked-posts",
    response_model=Page[PostSummary],
    responses=GATED_RESPONSES,
    summary="Posts this profile liked",
)
async def list_liked_posts(
    response: Response,
    username: str,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=settings.engagements_page_size, ge=1, le=MAX_PAGE_SIZE),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> Page[PostSummary]:
    return _paged(response, await post_service.list_liked_posts(db, viewer, username, page, size))


@router.get(
    "/{username}/favorited-posts",
    response_model=Page[PostSummary],
    responses=GATED_RESPONSES,
    summary="Posts this profile favorited",
)
async def list_favorited_posts(
    response: Response,
    username: str,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=settings.engagements_page_size, ge=1, le=MAX_PAGE_SIZE),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> Page[PostSummary]:
    return _paged(
        response, await post_service.list_favorited_posts(db, viewer, username, page, size)
    )


# ── Follow ────────────────────────────────────────────────────────────────


@router.post("/{username}/follow", response_model=FollowStatus, summary="Follow a user")
async def follow(
    username: str,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> FollowStatus:
    return await follow_service.follow(db, viewer, username)


@router.delete("/{username}/follow", response_model=FollowStatus, summary="Unfollow a user")
async def unfollow(
    username: str,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> FollowStatus:
    return await follow_service.unfollow(db, viewer, username)
