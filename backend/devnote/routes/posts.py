"""
DevNote Backend - Post Routes
=============================

What:  Create, read, and re-tag posts; like and favorite them.
How:   A post the viewer may not see answers 404 on every route here, so
       PRIVATE posts are indistinguishable from missing ones.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.database import get_db_session
from devnote.dependencies import get_viewer, require_viewer
from devnote.policy.visibility import Viewer
from devnote.schemas.common import ErrorResponse
from devnote.schemas.post import (
    EngagementStatus,
    PostCreateRequest,
    PostDetail,
    PostResponse,
    VisibilityUpdateRequest,
)
from devnote.services.engagement_service import engagement_service
from devnote.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])

NOT_FOUND = {404: {"description": "Post not found", "model": ErrorResponse}}


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"description": "Login required", "model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    body: PostCreateRequest,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.create_post(
        db, viewer, title=body.title, content=body.content, visibility=body.visibility
    )


@router.get("/{post_id}", response_model=PostDetail, responses=NOT_FOUND, summary="Read a post")
async def get_post(
    post_id: int,
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> PostDetail:
    return await engagement_service.get_post_detail(db, viewer, post_id)


@router.patch(
    "/{post_id}/visibility",
    response_model=PostResponse,
    responses={
        **NOT_FOUND,
        403: {"description": "Not the author", "model": ErrorResponse},
    },
    summary="Change a post's visibility",
)
async def update_visibility(
    post_id: int,
    body: VisibilityUpdateRequest,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.update_visibility(db, viewer, post_id, body.visibility)


# ── Engagement ────────────────────────────────────────────────────────────


@router.post("/{post_id}/like", response_model=EngagementStatus, responses=NOT_FOUND)
async def toggle_like(
    post_id: int,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> EngagementStatus:
    return await engagement_service.toggle_like(db, viewer, post_id)


@router.delete("/{post_id}/like", response_model=EngagementStatus, responses=NOT_FOUND)
async def unlike(
    post_id: int,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> EngagementStatus:
    return await engagement_service.unlike(db, viewer, post_id)


@router.post("/{post_id}/favorite", response_model=EngagementStatus, responses=NOT_FOUND)
async def toggle_favorite(
    post_id: int,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> EngagementStatus:
    return await engagement_service.toggle_favorite(db, viewer, post_id)


@router.delete("/{post_id}/favorite", response_model=EngagementStatus, responses=NOT_FOUND)
async def unfavorite(
    post_id: int,
    viewer: Viewer = Depends(require_viewer),
    db: AsyncSession = Depends(get_db_session),
) -> EngagementStatus:
    return await engagement_service.unfavorite(db, viewer, post_id)
