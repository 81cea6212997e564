"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.api.security import decode_access_token
from ridehail.domain.entities import Actor
from ridehail.domain.enums import UserRole
from ridehail.domain.errors import AuthenticationError, AuthorizationError
from ridehail.infrastructure.database import async_session_factory
from ridehail.infrastructure.models import UserModel
from ridehail.infrastructure.repositories import (
    DriverProfileRepository,
    UserRepository,
)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> UserModel:
    """Decode the Bearer token and load the (still active) user."""
    if credentials is None:
        raise AuthenticationError("Missing Bearer token")
    payload = decode_access_token(credentials.credentials)

    user = await UserRepository(db).get_by_id(payload["sub"])
    if user is None:
        raise AuthenticationError("User no longer exists")
    if not user.is_active:
        raise AuthorizationError("Account is deactivated")
    return user


async def get_current_actor(
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    role = UserRole(user.role)
    profile_id = None
    if role == UserRole.DRIVER:
        profile = await DriverProfileRepository(db).get_by_user_id(user.id)
        profile_id = profile.id if profile else None
    return Actor(user_id=user.id, role=role, driver_profile_id=profile_id)


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if actor.role != UserRole.ADMIN:
        raise AuthorizationError("Admin access required")
    return actor


async def require_driver(actor: Actor = Depends(get_current_actor)) -> Actor:
    if actor.role != UserRole.DRIVER:
        raise AuthorizationError("Driver access required")
    return actor
