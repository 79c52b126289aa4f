"""Create users, posts, follows, likes and favorites tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial DevNote schema.
How:   Portable column types (Integer keys, timezone-aware DateTime, enums
       stored as VARCHAR) so the same migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(50), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar", sa.String(255), nullable=True, comment="Public /uploads/... path"),
        sa.Column(
            "role",
            sa.Enum("USER", "ADMIN", name="role", native_enum=False, length=20),
            nullable=False,
            server_default="USER",
        ),
        sa.Column("show_followers", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_following", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_likes", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_favorites", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "author_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "visibility",
            sa.Enum(
                "PUBLIC", "FOLLOWERS", "PRIVATE",
                name="postvisibility", native_enum=False, length=20,
            ),
            nullable=False,
            server_default="PUBLIC",
        ),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("idx_posts_author_created", "posts", ["author_id", "created_at"])

    op.create_table(
        "follows",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "follower_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "followee_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("follower_id", "followee_id", name="uq_follows_pair"),
    )
    op.create_index("idx_follows_followee", "follows", ["followee_id", "created_at"])

    for table, time_column in (("likes", "liked_at"), ("favorites", "favorited_at")):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                "user_id", sa.Integer(),
                sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
            ),
            sa.Column(
                "post_id", sa.Integer(),
                sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False,
            ),
            _created_at(time_column),
            sa.UniqueConstraint("user_id", "post_id", name=f"uq_{table}_user_post"),
        )
        op.create_index(f"idx_{table}_user_{time_column}", table, ["user_id", time_column])


def downgrade() -> None:
    op.drop_table("favorites")
    op.drop_table("likes")
    op.drop_table("follows")
    op.drop_index("idx_posts_author_created", table_name="posts")
    op.drop_table("posts")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
