"""
Per-IP request limits.

Three budgets, each over a 15 minute window by default:
- public site and verification: 100 requests
- admin panel: 50 requests, shared across all admin routes
- login: 5 attempts

Limits are counted in process memory unless RATE_LIMIT_STORAGE_URI
points at a shared store such as redis.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from donation_tracker.config import get_settings
from donation_tracker.services.audit_service import client_ip

logger = logging.getLogger(__name__)

settings = get_settings()

TOO_MANY_REQUESTS = "too many requests, try again later"
TOO_MANY_LOGINS = "too many login attempts, try again later"


def rate_limit_key(request: Request) -> str:
    """Limits follow the caller's IP, as seen through the proxy."""
    return client_ip(request) or "unknown"


limiter = Limiter(
    key_func=rate_limit_key,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

public_limit = limiter.shared_limit(
    settings.PUBLIC_RATE_LIMIT, scope="public", error_message=TOO_MANY_REQUESTS
)
admin_limit = limiter.shared_limit(
    settings.ADMIN_RATE_LIMIT, scope="admin", error_message=TOO_MANY_REQUESTS
)
login_limit = limiter.limit(settings.LOGIN_RATE_LIMIT, error_message=TOO_MANY_LOGINS)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(
        "Rate limit exceeded for %s on %s", rate_limit_key(request), request.url.path
    )
    return JSONResponse(status_code=429, content={"error": exc.detail})
