"""
DevNote Backend - Engagement Service Tests
==========================================
"""

import pytest

from devnote.exceptions import AuthenticationError, NotFoundError
from devnote.policy.visibility import PostVisibility, Viewer
from devnote.services.engagement_service import EngagementService


class TestLikes:

    def setup_method(self):
        self.service = EngagementService()

    @pytest.mark.asyncio
    async def test_toggle_like_on_and_off(self, db_session, make_user, make_post):
        alice, _ = await make_user("alice")
        bob, bob_viewer = await make_user("bob")
        post = await make_post(alice)

        liked = await self.service.toggle_like(db_session, bob_viewer, post.id)
        assert liked.active and liked.count == 1
        assert await self.service.has_liked(db_session, bob.id, post.id)

        unliked = await self.service.toggle_like(db_session, bob_viewer, post.id)
        assert not unliked.active and unliked.count == 0

    @pytest.mark.asyncio
    async def test_unlike_is_idempotent(self, db_session, make_user, make_post):
        alice, _ = await make_user("alice")
        _, bob_viewer = await make_user("bob")
        post = await make_post(alice)

        status = await self.service.unlike(db_session, bob_viewer, post.id)
        assert not status.active and status.count == 0

    @pytest.mark.asyncio
    async def test_cannot_like_hidden_post(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        _, bob_viewer = await make_user("bob")
        post = await make_post(alice, visibility=PostVisibility.PRIVATE)

        with pytest.raises(NotFoundError):
            await self.service.toggle_like(db_session, bob_viewer, post.id)

        own = await self.service.toggle_like(db_session, alice_viewer, post.id)
        assert own.active

    @pytest.mark.asyncio
    async def test_anonymous_cannot_like(self, db_session, make_user, make_post):
        alice, _ = await make_user("alice")
        post = await make_post(alice)
        with pytest.raises(AuthenticationError):
            await self.service.toggle_like(db_session, Viewer.anonymous(), post.id)

    @pytest.mark.asyncio
    async def test_missing_post(self, db_session, make_user):
        _, bob_viewer = await make_user("bob")
        with pytest.raises(NotFoundError):
            await self.service.toggle_like(db_session, bob_viewer, 12345)


class TestFavorites:

    def setup_method(self):
        self.service = EngagementService()

    @pytest.mark.asyncio
    async def test_favorites_counted_per_post(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        _, bob_viewer = await make_user("bob")
        post = await make_post(alice)

        await self.service.toggle_favorite(db_session, alice_viewer, post.id)
        status = await self.service.toggle_favorite(db_session, bob_viewer, post.id)
        assert status.active and status.count == 2

        status = await self.service.unfavorite(db_session, bob_viewer, post.id)
        assert not status.active and status.count == 1

    @pytest.mark.asyncio
    async def test_like_and_favorite_are_independent(self, db_session, make_user, make_post):
        alice, _ = await make_user("alice")
        bob, bob_viewer = await make_user("bob")
        post = await make_post(alice)

        await self.service.toggle_like(db_session, bob_viewer, post.id)
        assert await self.service.has_liked(db_session, bob.id, post.id)
        assert not await self.service.has_favorited(db_session, bob.id, post.id)


class TestPostDetail:

    def setup_method(self):
        self.service = EngagementService()

    @pytest.mark.asyncio
    async def test_detail_reflects_viewer_state(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        _, bob_viewer = await make_user("bob")
        post = await make_post(alice)
        await self.service.toggle_like(db_session, bob_viewer, post.id)
        await self.service.toggle_favorite(db_session, bob_viewer, post.id)
        await self.service.toggle_favorite(db_session, alice_viewer, post.id)

        as_bob = await self.service.get_post_detail(db_session, bob_viewer, post.id)
        assert (as_bob.like_count, as_bob.favorite_count) == (1, 2)
        assert as_bob.liked_by_me and as_bob.favorited_by_me

        as_alice = await self.service.get_post_detail(db_session, alice_viewer, post.id)
        assert not as_alice.liked_by_me
        assert as_alice.favorited_by_me

        anonymous = await self.service.get_post_detail(db_session, Viewer.anonymous(), post.id)
        assert anonymous.like_count == 1
        assert not anonymous.liked_by_me and not anonymous.favorited_by_me

    @pytest.mark.asyncio
    async def test_detail_hides_private_post(self, db_session, make_user, make_post):
        alice, _ = await make_user("alice")
        _, bob_viewer = await make_user("bob")
        post = await make_post(alice, visibility=PostVisibility.PRIVATE)
        with pytest.raises(NotFoundError):
            await self.service.get_post_detail(db_session, bob_viewer, post.id)
