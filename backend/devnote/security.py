"""
DevNote Backend - Credentials and Tokens
========================================

What:  Password hashing and bearer-token encoding/decoding.
How:   Passwords are hashed with werkzeug.security (salted, self-describing
       hash strings). Tokens are PyJWT HS256 tokens carrying the user id in
       `sub`, plus `iat` and `exp`.
Who:   UserService (register/login) and the identity dependency.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from devnote.config import settings

logger = logging.getLogger(__name__)


def hash_password(raw_password: str) -> str:
    return generate_password_hash(raw_password)


def verify_password(password_hash: str, raw_password: str) -> bool:
    return check_password_hash(password_hash, raw_password)


def create_access_token(user_id: int, expires_in: Optional[int] = None) -> str:
    """
    Issue a signed token for `user_id`.

    Args:
        user_id: Stored in the `sub` claim (as a string, per RFC 7519)
        expires_in: Lifetime in seconds; defaults to settings.jwt_expire_seconds
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else settings.jwt_expire_seconds
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[int]:
    """
    Return the user id carried by a valid token, or None.

    Expired, tampered, or malformed tokens all yield None; the caller decides
    how to respond (the identity dependency answers 401).
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.InvalidTokenError as e:
        logger.info("Rejected invalid access token: %s", type(e).__name__)
        return None

    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        logger.info("Rejected access token with non-numeric subject")
        return None
