"""Logging middleware."""

import re
import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from shortener.common.logging_config import get_logger


REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9-]{1,64}")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging.
    
    Each request gets a short id, stored on ``request.state.request_id`` and
    echoed back in the ``X-Request-ID`` response header. A caller-supplied id
    is reused only when it is 1-64 letters, digits or dashes.
    """
    
    def __init__(self, app, logger: logging.Logger = None):
        """Initialize logging middleware."""
        super().__init__(app)
        self.logger = logger or get_logger("shortener.web")
    
    async def dispatch(self, request: Request, call_next: Callable):
        """Log request and response."""
        start_time = time.time()
        request_id = request.headers.get(REQUEST_ID_HEADER, "")
        if not REQUEST_ID_PATTERN.fullmatch(request_id):
            request_id = uuid.uuid4().hex[:9]
        request.state.request_id = request_id
        
        # Log request
        client_ip = request.client.host if request.client else "unknown"
        self.logger.info(
            f"[{request_id}] Request: {request.method} {request.url.path} from {client_ip}"
        )
        
        # Process request
        response = await call_next(request)
        
        # Calculate duration
        duration_ms = (time.time() - start_time) * 1000
        
        # Log response
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        self.logger.log(
            level,
            f"[{request_id}] Response: {request.method} {request.url.path} - "
            f"Status: {response.status_code} - Duration: {duration_ms:.2f}ms"
        )
        
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
