"""Per-client rate limiting shared by all routers."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from ridehail.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)

# Decorator argument for every public endpoint
RATE_LIMIT = settings.rate_limit
