"""
DevNote Backend - Post SQLAlchemy Model
=======================================

What:  ORM model for the `posts` table.
Who:   Queried by PostService for profile listings, single reads, and the
       liked/favorited lists.

Query patterns:
    - Profile listing: WHERE author_id = :id AND visibility IN (:tags)
      ORDER BY created_at DESC, id ASC
      → idx_posts_author_created
    - Single post: primary key
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devnote.database import Base
from devnote.models.user import User
from devnote.policy.visibility import DEFAULT_POST_VISIBILITY, PostVisibility


class Post(Base):
    """
    A blog post. `visibility` always holds exactly one PostVisibility tag
    and is changed only by the author.
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    visibility: Mapped[PostVisibility] = mapped_column(
        Enum(PostVisibility, native_enum=False, length=20),
        nullable=False,
        default=DEFAULT_POST_VISIBILITY,
        server_default=DEFAULT_POST_VISIBILITY.value,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Many-to-one, loaded in the same SELECT so responses can carry the
    # author's username without lazy loading on an async session.
    author: Mapped[User] = relationship(User, lazy="joined", innerjoin=True)

    __table_args__ = (
        Index("idx_posts_author_created", "author_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, author_id={self.author_id}, "
            f"visibility='{self.visibility}')>"
        )
