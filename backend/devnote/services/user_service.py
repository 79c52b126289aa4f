"""
DevNote Backend - User Service
==============================

What:  Registration, login, user lookup, profile edits, privacy settings, and
       the sub-resource authorization step shared by every gated list.
Who:   Called by the auth/user routes and by the other services.

Gated list flow (followers, following, liked, favorited):

    username ──▶ lookup ──▶ ProfileSnapshot ──▶ VisibilityPolicy
                   │                               │
                   ▼                               ▼
             NotFoundError (404)         FORBIDDEN → ForbiddenError (403)
                                         ALLOWED   → caller runs its query

The policy returns a decision value; this module is where a denial becomes an
exception.
"""

import logging
import re
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.config import settings
from devnote.exceptions import (
    AuthenticationError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    UserAlreadyExistsError,
    ValidationError,
)
from devnote.models.user import User
from devnote.policy.visibility import (
    AccessDecision,
    ProfileSnapshot,
    ResourceKind,
    Viewer,
    visibility_policy,
)
from devnote.schemas.user import PrivacySettings
from devnote.security import hash_password, verify_password
from devnote.services.file_service import file_service

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+$")


def require_authenticated(viewer: Viewer) -> int:
    """Return the viewer's user id, or raise AuthenticationError for anonymous."""
    if not viewer.is_authenticated:
        raise AuthenticationError()
    return viewer.user_id


class UserService:
    """
    Business logic for accounts and profile ownership.

    Stateless; every method receives the request's AsyncSession. Writes are
    flushed here and committed by `get_db_session`.
    """

    # ── Lookups ───────────────────────────────────────────────────────────

    async def get_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user %s: %s", username, str(e))
            raise DatabaseError(context={"username": username})

    async def get_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        try:
            return await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def require_by_username(self, db: AsyncSession, username: str) -> User:
        user = await self.get_by_username(db, username)
        if user is None:
            raise NotFoundError(resource="user", resource_id=username)
        return user

    # ── Registration & login ──────────────────────────────────────────────

    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> User:
        """
        Create a new account with all privacy flags on.

        Raises:
            ValidationError: short password, confirmation mismatch, bad email
            UserAlreadyExistsError: username or email already registered
        """
        if len(password) < settings.password_min_length:
            raise ValidationError(
                message=f"Password must be at least {settings.password_min_length} characters",
                field="password",
            )
        if password != confirm_password:
            raise ValidationError(message="Passwords do not match", field="confirm_password")

        email = email.strip()
        if not EMAIL_PATTERN.match(email):
            raise ValidationError(message="Email address is not valid", field="email")

        existing = await db.execute(
            select(User.username, User.email).where(
                or_(User.username == username, func.lower(User.email) == email.lower())
            )
        )
        for taken_username, taken_email in existing.all():
            if taken_username == username:
                raise UserAlreadyExistsError(field="username", value=username)
            raise UserAlreadyExistsError(field="email")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration
            logger.info("Registration conflict for username %s", username)
            raise UserAlreadyExistsError(field="username", value=username)
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", username, str(e), exc_info=True)
            raise DatabaseError(message="Could not create the account. Please try again.")

        logger.info("User registered: %s (id=%s)", username, user.id)
        return user

    async def authenticate(self, db: AsyncSession, username: str, password: str) -> User:
        """Return the user for valid credentials; AuthenticationError otherwise."""
        user = await self.get_by_username(db, username)
        if user is None or not verify_password(user.password_hash, password):
            logger.info("Failed login for username %s", username)
            raise AuthenticationError(message="Invalid username or password")
        return user

    async def resolve_viewer(self, db: AsyncSession, user_id: int) -> Viewer:
        """Viewer for a token subject; AuthenticationError if the user is gone."""
        user = await self.get_by_id(db, user_id)
        if user is None:
            raise AuthenticationError(message="Token refers to an unknown user")
        return Viewer.authenticated(user.id)

    # ── Authorization for gated lists ─────────────────────────────────────

    async def authorize_sub_resource(
        self,
        db: AsyncSession,
        viewer: Viewer,
        username: str,
        kind: ResourceKind,
    ) -> User:
        """
        Resolve `username` and check that `viewer` may see its `kind` list.

        Returns:
            The target user, when access is allowed.

        Raises:
            NotFoundError: no such user
            ForbiddenError: the list is private to its owner
        """
        user = await self.get_by_username(db, username)
        profile = ProfileSnapshot.of(user) if user is not None else None
        result = visibility_policy.evaluate_sub_resource_access(viewer, profile, kind)

        if result.decision is AccessDecision.NOT_FOUND:
            raise NotFoundError(resource="user", resource_id=username)
        if result.decision is AccessDecision.FORBIDDEN:
            raise ForbiddenError(
                message=result.reason,
                context={"resource": kind.value, "username": username},
            )
        return user

    # ── Owner-only edits ──────────────────────────────────────────────────

    async def _require_owner(self, db: AsyncSession, viewer: Viewer, username: str) -> User:
        require_authenticated(viewer)
        user = await self.require_by_username(db, username)
        if not visibility_policy.is_self(viewer, ProfileSnapshot.of(user)):
            raise ForbiddenError(
                message="You can only edit your own profile",
                context={"username": username},
            )
        return user

    async def update_profile(
        self,
        db: AsyncSession,
        viewer: Viewer,
        username: str,
        display_name: Optional[str] = None,
        bio: Optional[str] = None,
        avatar_filename: Optional[str] = None,
        avatar_content: Optional[bytes] = None,
        avatar_content_length: Optional[int] = None,
    ) -> User:
        """
        Update display name, bio and/or avatar. Fields left as None are kept.

        A new avatar is validated and written first; the previous file is
        removed only after the row has been flushed, and the new file is
        removed if the flush fails.
        """
        user = await self._require_owner(db, viewer, username)

        if display_name is not None:
            display_name = display_name.strip()
            if len(display_name) > 50:
                raise ValidationError(
                    message="Display name must be at most 50 characters", field="display_name"
                )
            user.display_name = display_name or None

        if bio is not None:
            if len(bio) > 200:
                raise ValidationError(message="Bio must be at most 200 characters", field="bio")
            user.bio = bio or None

        new_avatar_path: Optional[str] = None
        old_avatar = user.avatar
        if avatar_content is not None:
            new_avatar_path, public_url = await file_service.validate_and_store(
                filename=avatar_filename or "avatar",
                content=avatar_content,
                content_length=avatar_content_length,
            )
            user.avatar = public_url

        try:
            await db.flush()
        except SQLAlchemyError as e:
            if new_avatar_path:
                await file_service.cleanup_file(new_avatar_path)
            logger.error("Database error updating profile %s: %s", username, str(e))
            raise DatabaseError(message="Could not update the profile. Please try again.")

        if new_avatar_path and old_avatar:
            old_path = file_service.resolve_public_url(old_avatar)
            if old_path is not None:
                await file_service.cleanup_file(str(old_path))

        logger.info("Profile updated: %s", username)
        return user

    async def update_privacy_settings(
        self,
        db: AsyncSession,
        viewer: Viewer,
        username: str,
        privacy: PrivacySettings,
    ) -> PrivacySettings:
        """Replace all four flags. Only the owner may call this."""
        user = await self._require_owner(db, viewer, username)
        user.show_followers = privacy.show_followers
        user.show_following = privacy.show_following
        user.show_likes = privacy.show_likes
        user.show_favorites = privacy.show_favorites
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating privacy for %s: %s", username, str(e))
            raise DatabaseError(message="Could not update privacy settings. Please try again.")

        logger.info(
            "Privacy updated for %s: followers=%s following=%s likes=%s favorites=%s",
            username,
            user.show_followers,
            user.show_following,
            user.show_likes,
            user.show_favorites,
        )
        return PrivacySettings.model_validate(user)


user_service = UserService()
