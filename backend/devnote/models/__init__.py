"""
DevNote Backend - ORM Models
============================

Importing this package registers every table on `Base.metadata`, which is
what Alembic autogenerate and the test suite's `create_all` rely on.
"""

from devnote.models.user import Role, User
from devnote.models.post import Post
from devnote.models.follow import Follow
from devnote.models.engagement import Favorite, Like

__all__ = ["Role", "User", "Post", "Follow", "Like", "Favorite"]
