"""API routes implementation."""

from typing import List

from fastapi import APIRouter, Request, HTTPException, status
from datetime import datetime, timezone

from .schemas import (
    ShortenRequest,
    ShortenResponse,
    URLStatsEntry,
    URLAnalyticsResponse,
    SummaryResponse,
    CleanupResponse,
    HealthResponse,
    ErrorResponse,
)
from ..links import short_link_for
from shortener.errors import CodeConflictError, CodeGenerationExhaustedError

router = APIRouter()


@router.post(
    "/shorturls",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
        503: {"model": ErrorResponse, "description": "No free short code could be generated"},
    },
    summary="Create short URL",
    description=(
        "Create a shortened URL valid for `validity` minutes, or the configured default "
        "when omitted. Optionally provide a custom short code."
    ),
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    try:
        mapping = await service.create_short_url(
            original_url=body.url,
            validity_minutes=body.validity,
            custom_code=body.shortcode,
        )
    except CodeConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except CodeGenerationExhaustedError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return ShortenResponse(
        short_code=mapping.short_code,
        short_link=short_link_for(request, mapping.short_code),
        original_url=mapping.original_url,
        created_at=mapping.created_at,
        expiry=mapping.expiry_at,
    )


@router.get(
    "/stats",
    response_model=List[URLStatsEntry],
    summary="List URL statistics",
    description="List short URLs with click counts. Expired URLs awaiting cleanup are included on request.",
)
async def list_statistics(request: Request, include_expired: bool = False):
    """List statistics for every stored short URL."""
    service = request.app.state.service
    now = service.registry.now()

    mappings = await service.list_urls(include_expired=include_expired)

    return [
        URLStatsEntry(
            short_code=m.short_code,
            short_link=short_link_for(request, m.short_code),
            original_url=m.original_url,
            created_at=m.created_at,
            expires_at=m.expiry_at,
            is_active=m.is_live(now),
            click_count=m.access_count,
            click_timestamps=[event.timestamp for event in m.access_log],
        )
        for m in mappings
    ]


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Get statistics summary",
    description="Get service-wide totals.",
)
async def get_summary(request: Request):
    """Get service statistics."""
    service = request.app.state.service

    stats = await service.get_statistics()

    return SummaryResponse(**stats)


@router.get(
    "/urls/{short_code}",
    response_model=URLAnalyticsResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Get URL analytics",
    description="Get click analytics for a shortened URL.",
)
async def get_url_analytics(request: Request, short_code: str):
    """Get analytics for a shortened URL."""
    service = request.app.state.service

    analytics = await service.get_analytics(short_code)

    if not analytics:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{short_code}' not found",
        )

    return URLAnalyticsResponse(
        **{**analytics, "recent_clicks": [e.to_dict() for e in analytics["recent_clicks"]]}
    )


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    summary="Remove expired URLs",
    description="Run a cleanup sweep now instead of waiting for the periodic one.",
)
async def cleanup_expired(request: Request):
    """Remove expired short URLs."""
    service = request.app.state.service

    removed = await service.cleanup_expired()

    return CleanupResponse(removed=removed)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        registry="healthy" if health["registry"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
