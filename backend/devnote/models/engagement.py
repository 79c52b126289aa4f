"""
DevNote Backend - Like and Favorite SQLAlchemy Models
=====================================================

What:  Engagement facts between a user and a post.
How:   At most one Like and one Favorite per (user, post) pair, enforced by a
       unique constraint. These are membership facts, not counters; counts are
       computed with COUNT(*).

The liked/favorited lists are ordered by the engagement timestamp, newest
first, so each table carries its own time column.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from devnote.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Like(Base):
    __tablename__ = "likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    liked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),
        Index("idx_likes_user_liked_at", "user_id", "liked_at"),
    )

    def __repr__(self) -> str:
        return f"<Like(user_id={self.user_id}, post_id={self.post_id})>"


class Favorite(Base):
    __tablename__ = "favorites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    favorited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_favorites_user_post"),
        Index("idx_favorites_user_favorited_at", "user_id", "favorited_at"),
    )

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id}, post_id={self.post_id})>"
