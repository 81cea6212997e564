"""JWT access tokens (HS256 by default)."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from ridehail.config import settings
from ridehail.domain.enums import UserRole
from ridehail.domain.errors import AuthenticationError


def create_access_token(user_id: str, role: UserRole) -> str:
    """Sign a token carrying the user id (``sub``) and role."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    payload = {"sub": user_id, "role": UserRole(role).value, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired token") from None
    if not payload.get("sub"):
        raise AuthenticationError("Invalid token payload")
    return payload
