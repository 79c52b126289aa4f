"""
DevNote Backend - User SQLAlchemy Model
=======================================

What:  ORM model for the `users` table: identity, profile fields and the four
       privacy flags that gate the profile lists.
Who:   Used by the services; snapshotted into `ProfileSnapshot` for the
       visibility policy.

Table notes:
    - Integer primary key, exposed in JWT `sub` claims
    - username and email are unique; lookups by username are indexed
    - role is a closed enumeration stored as a short string
    - show_* flags default to TRUE and are only changed by the owner
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, Integer, String, Text, text, true
from sqlalchemy.orm import Mapped, mapped_column

from devnote.database import Base


class Role(str, enum.Enum):
    """Account role. Stored without any prefix convention."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """
    A registered author.

    Lifecycle:
        1. Created by registration with all privacy flags on
        2. Profile (display name, bio, avatar) and privacy flags edited by
           the owner only
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Public handle used in profile URLs",
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # werkzeug-format hash string ("method$salt$hash")
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    display_name: Mapped[str | None] = mapped_column(String(50), nullable=True, default=None)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    # Public URL path of the stored avatar, e.g. /uploads/avatars/2024/01/15/<uuid>.png
    avatar: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)

    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=20),
        nullable=False,
        default=Role.USER,
        server_default=Role.USER.value,
    )

    # ── Privacy flags ─────────────────────────────────────────────────────
    show_followers: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    show_following: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    show_likes: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    show_favorites: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
