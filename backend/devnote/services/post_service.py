"""
DevNote Backend - Post Service
==============================

What:  Post creation, single-post reads, visibility changes, and the three
       paged post lists (profile posts, liked posts, favorited posts).
Who:   Called by the posts and users routes, and by ProfileService for counts.

Listing a profile's posts:

    viewer + username ──▶ lookup author (404 if missing)
                               │
                               ▼
           VisibilityPolicy.visible_post_visibilities(viewer, author)
                               │
                               ▼
    SELECT ... WHERE author_id = :id AND visibility IN (:tags)
    ORDER BY created_at DESC, id ASC  LIMIT :size OFFSET (:page - 1) * :size

The profile post list is never denied; a stranger may simply get an empty page.
Liked and favorited lists are gated by the owner's privacy flags first and
then filtered post by post, so a PRIVATE post never leaks through someone
else's likes.
"""

import logging
from typing import List, Tuple

from sqlalchemy import and_, asc, desc, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.exceptions import DatabaseError, ForbiddenError, NotFoundError
from devnote.models.engagement import Favorite, Like
from devnote.models.post import Post
from devnote.policy.visibility import (
    NON_OWNER_POST_VISIBILITIES,
    PostVisibility,
    ProfileSnapshot,
    ResourceKind,
    Viewer,
    visibility_policy,
)
from devnote.schemas.common import Page
from devnote.schemas.post import PostResponse, PostSummary
from devnote.services.user_service import require_authenticated, user_service

logger = logging.getLogger(__name__)


def _offset(page: int, size: int) -> int:
    return (page - 1) * size


def _summary(post: Post) -> PostSummary:
    return PostSummary(
        id=post.id,
        title=post.title,
        visibility=post.visibility,
        author_username=post.author.username,
        created_at=post.created_at,
    )


def _viewer_can_see(viewer: Viewer):
    """
    SQL criterion matching posts `viewer` may see, across any author.

    Mirrors VisibilityPolicy.can_view_post for use inside a query.
    """
    public = Post.visibility.in_(sorted(NON_OWNER_POST_VISIBILITIES))
    if viewer.is_authenticated:
        return or_(public, Post.author_id == viewer.user_id)
    return public


class PostService:
    """Stateless; every method receives the request's AsyncSession."""

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_post(
        self,
        db: AsyncSession,
        viewer: Viewer,
        title: str,
        content: str,
        visibility: PostVisibility = PostVisibility.PUBLIC,
    ) -> PostResponse:
        author_id = require_authenticated(viewer)
        author = await user_service.get_by_id(db, author_id)
        if author is None:
            raise NotFoundError(resource="user", resource_id=str(author_id))

        post = Post(
            author_id=author_id,
            title=title,
            content=content,
            visibility=visibility,
        )
        post.author = author
        db.add(post)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating post for user %s: %s", author_id, str(e))
            raise DatabaseError(message="Could not create the post. Please try again.")

        logger.info("Post created: %s by user %s (%s)", post.id, author_id, visibility.value)
        return PostResponse.model_validate(post)

    async def update_visibility(
        self,
        db: AsyncSession,
        viewer: Viewer,
        post_id: int,
        visibility: PostVisibility,
    ) -> PostResponse:
        """
        Change a post's visibility tag. Author only.

        Non-authors get a 404 for posts they cannot see and a 403 for posts
        they can, so the call reveals nothing beyond what GET already does.
        """
        user_id = require_authenticated(viewer)
        post = await self._load(db, post_id)
        if post is None or not visibility_policy.can_view_post(
            viewer, post.author_id, post.visibility
        ):
            raise NotFoundError(resource="post", resource_id=str(post_id))
        if post.author_id != user_id:
            raise ForbiddenError(
                message="Only the author can change a post's visibility",
                context={"post_id": post_id},
            )

        previous = post.visibility
        post.visibility = visibility
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating post %s visibility: %s", post_id, str(e))
            raise DatabaseError(message="Could not update the post. Please try again.")

        logger.info(
            "Post %s visibility changed: %s -> %s", post_id, previous.value, visibility.value
        )
        return PostResponse.model_validate(post)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, post_id: int) -> Post | None:
        try:
            return await db.get(Post, post_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading post %s: %s", post_id, str(e))
            raise DatabaseError(context={"post_id": post_id})

    async def get_visible_post(self, db: AsyncSession, viewer: Viewer, post_id: int) -> Post:
        """
        Load a post the viewer may see.

        Raises:
            NotFoundError: missing, or hidden from this viewer
        """
        post = await self._load(db, post_id)
        if post is None or not visibility_policy.can_view_post(
            viewer, post.author_id, post.visibility
        ):
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def get_post(self, db: AsyncSession, viewer: Viewer, post_id: int) -> PostResponse:
        post = await self.get_visible_post(db, viewer, post_id)
        return PostResponse.model_validate(post)

    async def count_visible_posts(
        self, db: AsyncSession, viewer: Viewer, profile: ProfileSnapshot
    ) -> int:
        tags = visibility_policy.visible_post_visibilities(viewer, profile)
        try:
            result = await db.execute(
                select(func.count(Post.id)).where(
                    Post.author_id == profile.user_id,
                    Post.visibility.in_(sorted(tags)),
                )
            )
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error counting posts for %s: %s", profile.user_id, str(e))
            raise DatabaseError()

    async def list_profile_posts(
        self,
        db: AsyncSession,
        viewer: Viewer,
        username: str,
        page: int,
        size: int,
    ) -> Page[PostSummary]:
        """
        Page through `username`'s posts, filtered to the tags the viewer may see.

        Ordered by creation time descending; ties broken by id ascending so
        paging is stable.
        """
        author = await user_service.require_by_username(db, username)
        profile = ProfileSnapshot.of(author)
        tags = visibility_policy.visible_post_visibilities(viewer, profile)

        criteria = and_(Post.author_id == author.id, Post.visibility.in_(sorted(tags)))
        try:
            total = (await db.execute(select(func.count(Post.id)).where(criteria))).scalar() or 0
            result = await db.execute(
                select(Post)
                .where(criteria)
                .order_by(desc(Post.created_at), asc(Post.id))
                .offset(_offset(page, size))
                .limit(size)
            )
            posts = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing posts for %s: %s", username, str(e), exc_info=True)
            raise DatabaseError(message="Failed to retrieve posts. Please try again.")

        logger.debug(
            "Listed %d/%d posts of %s for viewer %s (tags=%s)",
            len(posts),
            total,
            username,
            viewer.user_id,
            sorted(t.value for t in tags),
        )
        return Page[PostSummary].build([_summary(p) for p in posts], total, page, size)

    # ── Engagement lists ──────────────────────────────────────────────────

    async def _engaged_posts(
        self,
        db: AsyncSession,
        viewer: Viewer,
        owner_id: int,
        model,
        time_column,
        page: int,
        size: int,
    ) -> Tuple[List[Post], int]:
        criteria = and_(model.user_id == owner_id, _viewer_can_see(viewer))
        base = select(Post).join(model, model.post_id == Post.id).where(criteria)
        total_query = (
            select(func.count(Post.id))
            .select_from(Post)
            .join(model, model.post_id == Post.id)
            .where(criteria)
        )
        total = (await db.execute(total_query)).scalar() or 0
        result = await db.execute(
            base.order_by(desc(time_column), asc(Post.id))
            .offset(_offset(page, size))
            .limit(size)
        )
        return list(result.scalars().all()), total

    async def count_engaged_posts(
        self, db: AsyncSession, viewer: Viewer, owner_id: int, kind: ResourceKind
    ) -> int:
        """Liked (LIKES) or favorited (FAVORITES) posts of `owner_id` visible to viewer."""
        model = Like if kind is ResourceKind.LIKES else Favorite
        try:
            result = await db.execute(
                select(func.count(Post.id))
                .select_from(Post)
                .join(model, model.post_id == Post.id)
                .where(model.user_id == owner_id, _viewer_can_see(viewer))
            )
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error counting %s for %s: %s", kind.value, owner_id, str(e))
            raise DatabaseError()

    async def list_liked_posts(
        self,
        db: AsyncSession,
        viewer: Viewer,
        username: str,
        page: int,
        size: int,
    ) -> Page[PostSummary]:
        owner = await user_service.authorize_sub_resource(db, viewer, username, ResourceKind.LIKES)
        try:
            posts, total = await self._engaged_posts(
                db, viewer, owner.id, Like, Like.liked_at, page, size
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing likes of %s: %s", username, str(e), exc_info=True)
            raise DatabaseError(message="Failed to retrieve liked posts. Please try again.")
        return Page[PostSummary].build([_summary(p) for p in posts], total, page, size)

    async def list_favorited_posts(
        self,
        db: AsyncSession,
        viewer: Viewer,
        username: str,
        page: int,
        size: int,
    ) -> Page[PostSummary]:
        owner = await user_service.authorize_sub_resource(
            db, viewer, username, ResourceKind.FAVORITES
        )
        try:
            posts, total = await self._engaged_posts(
                db, viewer, owner.id, Favorite, Favorite.favorited_at, page, size
            )
        except SQLAlchemyError as e:
            logger.error(
                "Database error listing favorites of %s: %s", username, str(e), exc_info=True
            )
            raise DatabaseError(message="Failed to retrieve favorited posts. Please try again.")
        return Page[PostSummary].build([_summary(p) for p in posts], total, page, size)


post_service = PostService()
