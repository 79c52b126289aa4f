"""
DevNote Backend - Authentication Routes
=======================================

What:  POST /api/auth/register and POST /api/auth/login.
How:   Registration creates the account and returns its public summary;
       login checks credentials and returns a bearer token. There is no
       server-side session; the token is the only credential.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from devnote.config import settings
from devnote.database import get_db_session
from devnote.schemas.common import ErrorResponse
from devnote.schemas.user import LoginRequest, RegisteredUser, RegisterRequest, TokenResponse
from devnote.security import create_access_token
from devnote.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisteredUser,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Password or email rejected", "model": ErrorResponse},
        409: {"description": "Username or email taken", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisteredUser:
    user = await user_service.register(
        db,
        username=body.username,
        email=body.email,
        password=body.password,
        confirm_password=body.confirm_password,
    )
    return RegisteredUser.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange username and password for a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    user = await user_service.authenticate(db, body.username, body.password)
    logger.info("User logged in: %s", user.username)
    return TokenResponse(
        access_token=create_access_token(user.id),
        expires_in=settings.jwt_expire_seconds,
    )
