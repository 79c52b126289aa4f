"""
DevNote Backend - Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test that touches the database gets a fresh in-memory SQLite
       database (aiosqlite + StaticPool, so all sessions share one
       connection) with the schema created from the ORM metadata.

Fixture Hierarchy:
    db_engine ──▶ db_session ──▶ make_user / make_post
        └──────▶ test_client (routes get sessions from db_engine)
    temp_storage, png_bytes: file service tests
"""

import os
import tempfile
from io import BytesIO

# Must run before any devnote import: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-use-only"
os.environ["UPLOAD_ROOT"] = tempfile.mkdtemp(prefix="devnote_test_")
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import devnote.models  # noqa: F401
from devnote.database import Base, get_db_session
from devnote.models.post import Post
from devnote.policy.visibility import PostVisibility, Viewer
from devnote.services.user_service import user_service

TEST_PASSWORD = "correct-horse-battery"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """
    Factory fixture: `await make_user("alice")` registers a user and returns
    (User, Viewer). Extra keyword arguments set privacy flags.
    """

    async def _make(username: str, **flags):
        user = await user_service.register(
            db_session,
            username=username,
            email=f"{username}@example.com",
            password=TEST_PASSWORD,
            confirm_password=TEST_PASSWORD,
        )
        for name, value in flags.items():
            setattr(user, name, value)
        await db_session.flush()
        return user, Viewer.authenticated(user.id)

    return _make


@pytest.fixture
def make_post(db_session):
    """Factory fixture: `await make_post(author, visibility=..., created_at=...)`."""

    async def _make(author, title="A post", visibility=PostVisibility.PUBLIC, created_at=None):
        post = Post(author_id=author.id, title=title, content="Body text", visibility=visibility)
        post.author = author
        if created_at is not None:
            post.created_at = created_at
        db_session.add(post)
        await db_session.flush()
        return post

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


def image_bytes(fmt: str = "PNG", size=(8, 8)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    return image_bytes


@pytest.fixture
def png_bytes():
    return image_bytes("PNG")


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_engine):
    """
    HTTPX AsyncClient bound to the app, with get_db_session redirected to the
    per-test database. Commits per request, like the real dependency.
    """
    from devnote.main import app

    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
