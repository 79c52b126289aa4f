"""
DevNote Backend - Request Dependencies
======================================

What:  FastAPI dependencies that resolve the current Viewer.
How:   Reads `Authorization: Bearer <token>`. No header means an anonymous
       viewer; a header with a bad, expired, or orphaned token is a 401.
Who:   Every route that passes a Viewer to a service.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.database import get_db_session
from devnote.exceptions import AuthenticationError
from devnote.policy.visibility import Viewer
from devnote.security import decode_access_token
from devnote.services.user_service import user_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must fall through to Viewer.anonymous()
bearer_scheme = HTTPBearer(auto_error=False)


async def get_viewer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Viewer:
    if credentials is None:
        return Viewer.anonymous()

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise AuthenticationError(message="Invalid or expired access token")
    return await user_service.resolve_viewer(db, user_id)


async def require_viewer(viewer: Viewer = Depends(get_viewer)) -> Viewer:
    """Like get_viewer, but anonymous requests are rejected with 401."""
    if not viewer.is_authenticated:
        raise AuthenticationError()
    return viewer
