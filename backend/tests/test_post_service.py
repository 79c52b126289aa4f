"""
DevNote Backend - Post Service Tests
====================================

What:  Profile post listing, single-post reads, visibility changes, and the
       liked/favorited lists, against an in-memory database.

The listing tests seed posts with fixed timestamps so ordering is exact.
"""

from datetime import datetime, timedelta, timezone

import pytest

from devnote.exceptions import AuthenticationError, ForbiddenError, NotFoundError
from devnote.models.engagement import Favorite, Like
from devnote.policy.visibility import PostVisibility, Viewer
from devnote.services.post_service import PostService

BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

MIXED_TAGS = [
    PostVisibility.PUBLIC,
    PostVisibility.PRIVATE,
    PostVisibility.FOLLOWERS,
    PostVisibility.PRIVATE,
    PostVisibility.PUBLIC,
    PostVisibility.FOLLOWERS,
    PostVisibility.PRIVATE,
]


async def seed_mixed_posts(make_post, author):
    posts = []
    for i, tag in enumerate(MIXED_TAGS):
        posts.append(
            await make_post(
                author,
                title=f"post {i}",
                visibility=tag,
                created_at=BASE_TIME + timedelta(minutes=i),
            )
        )
    return posts


class TestProfilePostListing:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_owner_sees_everything_newest_first(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        posts = await seed_mixed_posts(make_post, alice)

        page = await self.service.list_profile_posts(db_session, alice_viewer, "alice", 1, 100)

        assert page.total_elements == len(MIXED_TAGS)
        assert [p.id for p in page.content] == [p.id for p in reversed(posts)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 2, 3, 5])
    async def test_private_never_listed_for_others(self, db_session, make_user, make_post, size):
        alice, _ = await make_user("alice")
        _, bob = await make_user("bob")
        await seed_mixed_posts(make_post, alice)

        for viewer in (bob, Viewer.anonymous()):
            page_index = 1
            seen = []
            while True:
                page = await self.service.list_profile_posts(
                    db_session, viewer, "alice", page_index, size
                )
                seen.extend(page.content)
                assert all(p.visibility != PostVisibility.PRIVATE for p in page.content)
                if not page.has_next:
                    break
                page_index += 1
            assert len(seen) == 4
            assert page.total_elements == 4

    @pytest.mark.asyncio
    async def test_followers_posts_visible_without_follow(self, db_session, make_user, make_post):
        alice, _ = await make_user("alice")
        _, bob = await make_user("bob")
        await make_post(alice, visibility=PostVisibility.FOLLOWERS)

        page = await self.service.list_profile_posts(db_session, bob, "alice", 1, 10)
        assert [p.visibility for p in page.content] == [PostVisibility.FOLLOWERS]

    @pytest.mark.asyncio
    async def test_ties_broken_by_id(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        first = await make_post(alice, created_at=BASE_TIME)
        second = await make_post(alice, created_at=BASE_TIME)

        page = await self.service.list_profile_posts(db_session, alice_viewer, "alice", 1, 10)
        assert [p.id for p in page.content] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_page_envelope(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        await seed_mixed_posts(make_post, alice)

        page = await self.service.list_profile_posts(db_session, alice_viewer, "alice", 2, 3)
        assert page.current_page == 2
        assert page.total_pages == 3
        assert page.has_next and page.has_previous
        assert len(page.content) == 3

    @pytest.mark.asyncio
    async def test_unknown_author(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.list_profile_posts(db_session, Viewer.anonymous(), "ghost", 1, 10)


class TestSinglePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_create_requires_login(self, db_session):
        with pytest.raises(AuthenticationError):
            await self.service.create_post(db_session, Viewer.anonymous(), "t", "c")

    @pytest.mark.asyncio
    async def test_create_defaults_to_public(self, db_session, make_user):
        _, alice_viewer = await make_user("alice")
        post = await self.service.create_post(db_session, alice_viewer, "Hello", "World")
        assert post.visibility is PostVisibility.PUBLIC
        assert post.author.username == "alice"

    @pytest.mark.asyncio
    async def test_private_post_hidden_from_others(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        _, bob = await make_user("bob")
        post = await make_post(alice, visibility=PostVisibility.PRIVATE)

        assert (await self.service.get_post(db_session, alice_viewer, post.id)).id == post.id
        for viewer in (bob, Viewer.anonymous()):
            with pytest.raises(NotFoundError):
                await self.service.get_post(db_session, viewer, post.id)

    @pytest.mark.asyncio
    async def test_only_author_changes_visibility(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        _, bob = await make_user("bob")
        post = await make_post(alice)

        with pytest.raises(ForbiddenError):
            await self.service.update_visibility(db_session, bob, post.id, PostVisibility.PRIVATE)

        updated = await self.service.update_visibility(
            db_session, alice_viewer, post.id, PostVisibility.PRIVATE
        )
        assert updated.visibility is PostVisibility.PRIVATE
        assert updated.updated_at is not None

    @pytest.mark.asyncio
    async def test_non_author_gets_404_on_private_post(self, db_session, make_user, make_post):
        alice, _ = await make_user("alice")
        _, bob = await make_user("bob")
        post = await make_post(alice, visibility=PostVisibility.PRIVATE)
        with pytest.raises(NotFoundError):
            await self.service.update_visibility(db_session, bob, post.id, PostVisibility.PUBLIC)


class TestEngagementLists:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_favorites_hidden_from_bob_but_not_alice(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice", show_favorites=False)
        _, bob = await make_user("bob")
        post = await make_post(alice)
        db_session.add(Favorite(user_id=alice.id, post_id=post.id))
        await db_session.flush()

        with pytest.raises(ForbiddenError, match="favorites"):
            await self.service.list_favorited_posts(db_session, bob, "alice", 1, 5)

        page = await self.service.list_favorited_posts(db_session, alice_viewer, "alice", 1, 5)
        assert [p.id for p in page.content] == [post.id]

    @pytest.mark.asyncio
    async def test_liked_list_ordered_by_like_time(self, db_session, make_user, make_post):
        alice, _ = await make_user("alice")
        bob, bob_viewer = await make_user("bob")
        older = await make_post(alice, title="older")
        newer = await make_post(alice, title="newer")
        db_session.add_all([
            Like(user_id=bob.id, post_id=newer.id, liked_at=BASE_TIME),
            Like(user_id=bob.id, post_id=older.id, liked_at=BASE_TIME + timedelta(hours=1)),
        ])
        await db_session.flush()

        page = await self.service.list_liked_posts(db_session, Viewer.anonymous(), "bob", 1, 5)
        assert [p.id for p in page.content] == [older.id, newer.id]

    @pytest.mark.asyncio
    async def test_liked_list_skips_posts_viewer_cannot_see(self, db_session, make_user, make_post):
        alice, alice_viewer = await make_user("alice")
        bob, bob_viewer = await make_user("bob")
        secret = await make_post(alice, visibility=PostVisibility.PRIVATE)
        public = await make_post(alice)
        db_session.add_all([
            Like(user_id=bob.id, post_id=secret.id),
            Like(user_id=bob.id, post_id=public.id),
        ])
        await db_session.flush()

        as_stranger = await self.service.list_liked_posts(db_session, Viewer.anonymous(), "bob", 1, 5)
        assert [p.id for p in as_stranger.content] == [public.id]
        assert as_stranger.total_elements == 1

        as_author = await self.service.list_liked_posts(db_session, alice_viewer, "bob", 1, 5)
        assert as_author.total_elements == 2

    @pytest.mark.asyncio
    async def test_hidden_likes(self, db_session, make_user):
        await make_user("alice", show_likes=False)
        with pytest.raises(ForbiddenError, match="liked list is private"):
            await self.service.list_liked_posts(db_session, Viewer.anonymous(), "alice", 1, 5)

    @pytest.mark.asyncio
    async def test_ghost_lists(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.list_liked_posts(db_session, Viewer.anonymous(), "ghost", 1, 5)
        with pytest.raises(NotFoundError):
            await self.service.list_favorited_posts(db_session, Viewer.anonymous(), "ghost", 1, 5)
