"""
DevNote Backend - Follow Service
================================

What:  Follow / unfollow, follow-state queries, and the gated followers and
       following lists.
How:   A follow is one row in `follows`. Both operations are idempotent:
       following twice leaves one row, unfollowing a non-follower is a no-op.
"""

import logging

from sqlalchemy import asc, delete, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.exceptions import DatabaseError, ValidationError
from devnote.models.follow import Follow
from devnote.models.user import User
from devnote.policy.visibility import ResourceKind, Viewer
from devnote.schemas.common import Page
from devnote.schemas.post import FollowStatus
from devnote.schemas.user import UserSummary
from devnote.services.user_service import require_authenticated, user_service

logger = logging.getLogger(__name__)


class FollowService:

    async def is_following(self, db: AsyncSession, follower_id: int, followee_id: int) -> bool:
        result = await db.execute(
            select(Follow.id).where(
                Follow.follower_id == follower_id,
                Follow.followee_id == followee_id,
            )
        )
        return result.first() is not None

    async def count_followers(self, db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count(Follow.id)).where(Follow.followee_id == user_id)
        )
        return result.scalar() or 0

    async def count_following(self, db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count(Follow.id)).where(Follow.follower_id == user_id)
        )
        return result.scalar() or 0

    async def follow(self, db: AsyncSession, viewer: Viewer, username: str) -> FollowStatus:
        """
        Make the viewer follow `username`.

        Raises:
            AuthenticationError: anonymous viewer
            NotFoundError: unknown username
            ValidationError: following yourself
        """
        follower_id = require_authenticated(viewer)
        target = await user_service.require_by_username(db, username)
        if target.id == follower_id:
            raise ValidationError(message="You cannot follow yourself", field="username")

        try:
            if not await self.is_following(db, follower_id, target.id):
                db.add(Follow(follower_id=follower_id, followee_id=target.id))
                await db.flush()
                logger.info("User %s followed %s", follower_id, username)
            followers = await self.count_followers(db, target.id)
        except IntegrityError:
            # A concurrent request inserted the same edge first
            logger.info("Follow %s -> %s already present", follower_id, username)
            raise DatabaseError(message="Follow request conflicted. Please retry.")
        except SQLAlchemyError as e:
            logger.error("Database error following %s: %s", username, str(e))
            raise DatabaseError()

        return FollowStatus(username=username, following=True, followers_count=followers)

    async def unfollow(self, db: AsyncSession, viewer: Viewer, username: str) -> FollowStatus:
        follower_id = require_authenticated(viewer)
        target = await user_service.require_by_username(db, username)
        try:
            result = await db.execute(
                delete(Follow).where(
                    Follow.follower_id == follower_id,
                    Follow.followee_id == target.id,
                )
            )
            if result.rowcount:
                logger.info("User %s unfollowed %s", follower_id, username)
            followers = await self.count_followers(db, target.id)
        except SQLAlchemyError as e:
            logger.error("Database error unfollowing %s: %s", username, str(e))
            raise DatabaseError()

        return FollowStatus(username=username, following=False, followers_count=followers)

    # ── Gated lists ───────────────────────────────────────────────────────

    async def _list_related(
        self,
        db: AsyncSession,
        viewer: Viewer,
        username: str,
        kind: ResourceKind,
        page: int,
        size: int,
    ) -> Page[UserSummary]:
        owner = await user_service.authorize_sub_resource(db, viewer, username, kind)

        if kind is ResourceKind.FOLLOWERS:
            # People pointing at the owner
            join_on = Follow.follower_id == User.id
            where = Follow.followee_id == owner.id
        else:
            join_on = Follow.followee_id == User.id
            where = Follow.follower_id == owner.id

        try:
            total = (
                await db.execute(select(func.count(Follow.id)).where(where))
            ).scalar() or 0
            result = await db.execute(
                select(User)
                .join(Follow, join_on)
                .where(where)
                .order_by(desc(Follow.created_at), asc(User.id))
                .offset((page - 1) * size)
                .limit(size)
            )
            users = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing %s of %s: %s", kind.value, username, str(e))
            raise DatabaseError(message=f"Failed to retrieve {kind.value}. Please try again.")

        return Page[UserSummary].build(
            [UserSummary.model_validate(u) for u in users], total, page, size
        )

    async def list_followers(
        self, db: AsyncSession, viewer: Viewer, username: str, page: int, size: int
    ) -> Page[UserSummary]:
        return await self._list_related(db, viewer, username, ResourceKind.FOLLOWERS, page, size)

    async def list_following(
        self, db: AsyncSession, viewer: Viewer, username: str, page: int, size: int
    ) -> Page[UserSummary]:
        return await self._list_related(db, viewer, username, ResourceKind.FOLLOWING, page, size)


follow_service = FollowService()
