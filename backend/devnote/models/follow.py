"""
DevNote Backend - Follow SQLAlchemy Model
=========================================

What:  Directed follow edge (follower → followee).
How:   One row per ordered pair, enforced by uq_follows_pair. Following is a
       membership fact: follow inserts the row, unfollow deletes it.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from devnote.database import Base


class Follow(Base):
    __tablename__ = "follows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    follower_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    followee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("follower_id", "followee_id", name="uq_follows_pair"),
        Index("idx_follows_followee", "followee_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Follow(follower_id={self.follower_id}, followee_id={self.followee_id})>"
