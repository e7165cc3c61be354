"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import api_router
from .api.routes import shorten_url
from .api.schemas import ShortenResponse
from .web import web_router
from .middleware.headers import ForwardedHeadersMiddleware
from .middleware.logging import LoggingMiddleware


def _validation_message(exc: RequestValidationError) -> str:
    """First validation error as 'field: message'."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def create_app(
    registry_instance,
    service_instance,
    config,
    logger: logging.Logger = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        registry_instance: URL registry instance
        service_instance: Service instance
        config: Configuration instance
        logger: Optional logger for request logging

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="URL shortening service with expiring links and click analytics",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Store instances in app state for access in routes
    app.state.registry = registry_instance
    app.state.service = service_instance
    app.state.config = config
    app.state.sweeper = None
    app.state.logger = logger or logging.getLogger("shortener")

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add custom middleware (last added runs first)
    app.add_middleware(ForwardedHeadersMiddleware)
    app.add_middleware(LoggingMiddleware, logger=logger)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Answer malformed requests with 400 instead of FastAPI's default 422."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _validation_message(exc)},
        )

    app.include_router(api_router, prefix="/api", tags=["API"])
    # Creation is also served at the root path as POST /shorturls
    app.add_api_route(
        "/shorturls",
        shorten_url,
        methods=["POST"],
        response_model=ShortenResponse,
        status_code=status.HTTP_201_CREATED,
        include_in_schema=False,
    )
    app.include_router(web_router, tags=["Web"])

    return app
