"""
Rate limiting using slowapi.
Protects login and the public order endpoints from abuse.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.logging import get_logger
from shared.config.settings import get_settings

logger = get_logger(__name__)

_settings = get_settings()

# Limiter keyed by client IP. Decorated endpoints must accept a `request` argument.
limiter = Limiter(key_func=get_remote_address, enabled=_settings.rate_limit_enabled)

LOGIN_RATE_LIMIT = _settings.login_rate_limit
PUBLIC_ORDER_RATE_LIMIT = _settings.public_order_rate_limit


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render slowapi's RateLimitExceeded in the API's error format."""
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={"error": f"Too many requests: {exc.detail}"},
    )
