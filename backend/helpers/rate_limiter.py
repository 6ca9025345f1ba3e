"""Rate limiter configuration module.

This module is separate from main.py to avoid circular imports when routers
need to access the limiter.

Counters live in a `limits` storage backend chosen by URI, so a single
instance can use process memory while a multi-instance deployment points
RATE_LIMIT_STORAGE_URI at a shared Redis without touching any route.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from helpers.request_utils import get_rate_limit_key
from models.config import settings

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."

# Create rate limiter - imported by routers and main.py
limiter = Limiter(
    key_func=get_rate_limit_key,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer throttled requests with the fixed message the frontend expects."""
    logger.warning(
        f"Rate limit exceeded on {request.url.path} ({exc.detail}) "
        f"for {get_rate_limit_key(request)}"
    )
    return JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE})
