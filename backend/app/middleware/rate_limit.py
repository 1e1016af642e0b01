"""Rate limiting for the credential endpoints"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from app.config import settings


def get_identifier(request: Request) -> str:
    """
    Get identifier for rate limiting

    Priority:
    1. Session cookie (authenticated browser)
    2. IP address
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return f"session:{token[-16:]}"

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_identifier,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


RATE_LIMITS = {
    # Credential endpoints - brute-force protection
    "register": settings.RATE_LIMIT_AUTH,
    "login": settings.RATE_LIMIT_AUTH,

    # Public endpoints
    "health": "100/minute",
}


def get_rate_limit(endpoint: str) -> str:
    """Get rate limit for specific endpoint"""
    return RATE_LIMITS.get(endpoint, settings.RATE_LIMIT_DEFAULT[0])
