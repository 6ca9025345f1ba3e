"""
Request utilities for extracting client information.

Provides helpers to identify the client behind a request, handling proxy
headers only when the deployment says a trusted proxy sits in front.
"""

from typing import Optional

from fastapi import Request

from models.config import settings


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extract the client's real IP address from proxy headers.

    Handles common proxy headers in order of precedence:
    1. CF-Connecting-IP (Cloudflare)
    2. X-Real-IP (nginx)
    3. X-Forwarded-For (standard proxy header, first IP)
    4. Direct client.host

    Args:
        request: FastAPI request object

    Returns:
        Client IP address or None if not available
    """
    # Cloudflare
    cf_ip = request.headers.get("CF-Connecting-IP")
    if cf_ip:
        return cf_ip.strip()

    # nginx proxy
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    # Standard proxy header (comma-separated, first is client)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    # Direct connection
    if request.client:
        return request.client.host

    return None


def get_rate_limit_key(request: Request) -> str:
    """
    Identity used to bucket requests for rate limiting.

    Proxy headers are client-controlled unless a proxy overwrites them, so
    they are only consulted when TRUST_PROXY_HEADERS is enabled.
    """
    if settings.TRUST_PROXY_HEADERS:
        ip = get_client_ip(request)
    else:
        ip = request.client.host if request.client else None
    return ip or "unknown"
