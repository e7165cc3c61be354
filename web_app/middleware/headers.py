"""Forwarded headers middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from shortener.common.headers import get_client_ip


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to resolve the client address behind X-Forwarded-For."""

    async def dispatch(self, request: Request, call_next: Callable):
        """Store the resolved client IP on ``request.state.client_ip``."""
        request.state.client_ip = get_client_ip(
            dict(request.headers),
            request.client.host if request.client else None,
        )

        response = await call_next(request)
        return response
