"""
DevNote Backend - Engagement Service
====================================

What:  Likes and favorites on posts.
How:   Each is a membership row, at most one per (user, post). POST toggles
       the membership; DELETE removes it and is a no-op when absent.
       The viewer must be able to see the post (hidden posts answer 404).
       get_post_detail backs the single-post read with totals and the
       viewer's own like/favorite state.
"""

import logging
from typing import Type, Union

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.exceptions import DatabaseError
from devnote.models.engagement import Favorite, Like
from devnote.policy.visibility import Viewer
from devnote.schemas.post import EngagementStatus, PostDetail
from devnote.services.post_service import post_service
from devnote.services.user_service import require_authenticated

logger = logging.getLogger(__name__)

EngagementModel = Type[Union[Like, Favorite]]


class EngagementService:

    async def _exists(self, db: AsyncSession, model: EngagementModel, user_id: int, post_id: int) -> bool:
        result = await db.execute(
            select(model.id).where(model.user_id == user_id, model.post_id == post_id)
        )
        return result.first() is not None

    async def _count(self, db: AsyncSession, model: EngagementModel, post_id: int) -> int:
        result = await db.execute(select(func.count(model.id)).where(model.post_id == post_id))
        return result.scalar() or 0

    async def _remove(self, db: AsyncSession, model: EngagementModel, user_id: int, post_id: int) -> None:
        await db.execute(delete(model).where(model.user_id == user_id, model.post_id == post_id))

    async def _toggle(
        self, db: AsyncSession, viewer: Viewer, post_id: int, model: EngagementModel
    ) -> EngagementStatus:
        user_id = require_authenticated(viewer)
        await post_service.get_visible_post(db, viewer, post_id)
        label = model.__tablename__

        try:
            if await self._exists(db, model, user_id, post_id):
                await self._remove(db, model, user_id, post_id)
                active = False
            else:
                db.add(model(user_id=user_id, post_id=post_id))
                await db.flush()
                active = True
            count = await self._count(db, model, post_id)
        except IntegrityError:
            logger.info("Concurrent %s insert for user %s post %s", label, user_id, post_id)
            raise DatabaseError(message="Request conflicted with another one. Please retry.")
        except SQLAlchemyError as e:
            logger.error("Database error toggling %s on post %s: %s", label, post_id, str(e))
            raise DatabaseError()

        logger.info("User %s %s post %s (%s=%s)", user_id, "added" if active else "removed", post_id, label, count)
        return EngagementStatus(post_id=post_id, active=active, count=count)

    async def _clear(
        self, db: AsyncSession, viewer: Viewer, post_id: int, model: EngagementModel
    ) -> EngagementStatus:
        user_id = require_authenticated(viewer)
        await post_service.get_visible_post(db, viewer, post_id)
        try:
            await self._remove(db, model, user_id, post_id)
            count = await self._count(db, model, post_id)
        except SQLAlchemyError as e:
            logger.error("Database error removing %s on post %s: %s", model.__tablename__, post_id, str(e))
            raise DatabaseError()
        return EngagementStatus(post_id=post_id, active=False, count=count)

    async def toggle_like(self, db: AsyncSession, viewer: Viewer, post_id: int) -> EngagementStatus:
        return await self._toggle(db, viewer, post_id, Like)

    async def unlike(self, db: AsyncSession, viewer: Viewer, post_id: int) -> EngagementStatus:
        return await self._clear(db, viewer, post_id, Like)

    async def toggle_favorite(self, db: AsyncSession, viewer: Viewer, post_id: int) -> EngagementStatus:
        return await self._toggle(db, viewer, post_id, Favorite)

    async def unfavorite(self, db: AsyncSession, viewer: Viewer, post_id: int) -> EngagementStatus:
        return await self._clear(db, viewer, post_id, Favorite)

    async def has_liked(self, db: AsyncSession, user_id: int, post_id: int) -> bool:
        return await self._exists(db, Like, user_id, post_id)

    async def has_favorited(self, db: AsyncSession, user_id: int, post_id: int) -> bool:
        return await self._exists(db, Favorite, user_id, post_id)

    async def get_post_detail(self, db: AsyncSession, viewer: Viewer, post_id: int) -> PostDetail:
        """
        A readable post with its like and favorite totals and whether the
        viewer has liked or favorited it. Both flags are false for anonymous
        viewers. Hidden posts raise NotFoundError like any other read.
        """
        post = await post_service.get_post(db, viewer, post_id)
        try:
            like_count = await self._count(db, Like, post_id)
            favorite_count = await self._count(db, Favorite, post_id)
            liked = favorited = False
            if viewer.is_authenticated:
                liked = await self.has_liked(db, viewer.user_id, post_id)
                favorited = await self.has_favorited(db, viewer.user_id, post_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading engagement for post %s: %s", post_id, str(e))
            raise DatabaseError(context={"post_id": post_id})

        return PostDetail(
            **post.model_dump(),
            like_count=like_count,
            favorite_count=favorite_count,
            liked_by_me=liked,
            favorited_by_me=favorited,
        )


engagement_service = EngagementService()
