"""
DevNote Backend - Profile Service
=================================

What:  Assembles the profile page payload for GET /api/users/{username}.
How:   Combines the user row with counts from PostService, FollowService and
       the engagement tables. Follower/following/liked/favorited counts are
       shown regardless of the privacy flags; only the lists are gated. The
       post count matches what the viewer would see when listing posts.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.exceptions import DatabaseError
from devnote.policy.visibility import ProfileSnapshot, ResourceKind, Viewer, visibility_policy
from devnote.schemas.user import PrivacySettings, ProfileCounts, ProfileResponse
from devnote.services.follow_service import follow_service
from devnote.services.post_service import post_service
from devnote.services.user_service import user_service

logger = logging.getLogger(__name__)


class ProfileService:

    async def get_profile(self, db: AsyncSession, viewer: Viewer, username: str) -> ProfileResponse:
        user = await user_service.require_by_username(db, username)
        profile = ProfileSnapshot.of(user)
        is_self = visibility_policy.is_self(viewer, profile)

        try:
            counts = ProfileCounts(
                posts=await post_service.count_visible_posts(db, viewer, profile),
                followers=await follow_service.count_followers(db, user.id),
                following=await follow_service.count_following(db, user.id),
                liked_posts=await post_service.count_engaged_posts(
                    db, viewer, user.id, ResourceKind.LIKES
                ),
                favorited_posts=await post_service.count_engaged_posts(
                    db, viewer, user.id, ResourceKind.FAVORITES
                ),
            )
            is_following = (
                viewer.is_authenticated
                and not is_self
                and await follow_service.is_following(db, viewer.user_id, user.id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error building profile %s: %s", username, str(e))
            raise DatabaseError()

        return ProfileResponse(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            bio=user.bio,
            avatar=user.avatar,
            created_at=user.created_at,
            privacy=PrivacySettings.model_validate(user),
            counts=counts,
            is_self=is_self,
            is_following=bool(is_following),
        )


profile_service = ProfileService()
