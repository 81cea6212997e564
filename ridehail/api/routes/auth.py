"""
Auth endpoints
==============

POST /api/v1/auth/register -- create an account, returns a bearer token
POST /api/v1/auth/login    -- exchange e-mail + password for a bearer token
GET  /api/v1/auth/me       -- the authenticated account
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.dependencies import get_current_user, get_db
from ridehail.api.middleware import RATE_LIMIT, limiter
from ridehail.api.schemas import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from ridehail.api.security import create_access_token
from ridehail.domain.errors import AuthenticationError, AuthorizationError
from ridehail.infrastructure.models import UserModel
from ridehail.infrastructure.passwords import hash_password, verify_password
from ridehail.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    summary="Register a rider or driver account",
)
@limiter.limit(RATE_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    # Hashing runs in a worker thread, never on the event loop
    password_hash = await run_in_threadpool(hash_password, body.password)
    user = await UserRepository(db).add(
        UserModel(
            full_name=body.full_name.strip(),
            email=body.email,
            phone=body.phone.strip(),
            password_hash=password_hash,
            gender=body.gender,
            role=body.role,
            is_active=True,
        )
    )
    logger.info("Registered %s account %s", user.role.value, user.id)
    return TokenResponse(
        access_token=create_access_token(user.id, user.role),
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse, summary="Log in")
@limiter.limit(RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await UserRepository(db).get_by_email(body.email.strip())
    if user is None or not await run_in_threadpool(
        verify_password, body.password, user.password_hash
    ):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthorizationError("Account is deactivated")
    return TokenResponse(
        access_token=create_access_token(user.id, user.role),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse, summary="Current account")
async def me(user: UserModel = Depends(get_current_user)):
    return user
