"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from shortener.common.validators import is_valid_url


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""

    url: str = Field(..., description="The URL to shorten", min_length=1, max_length=2048)
    validity: Optional[int] = Field(
        None,
        description="Validity period in minutes (server default when omitted)",
        ge=1,
    )
    shortcode: Optional[str] = Field(
        None,
        description="Optional custom short code",
        min_length=3,
        max_length=10,
        pattern=r"^[a-zA-Z0-9]+$",
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        is_valid, error = is_valid_url(v)
        if not is_valid:
            raise ValueError(error)
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "validity": 30,
                },
                {
                    "url": "https://github.com/user/repo",
                    "validity": 1440,
                    "shortcode": "myrepo"
                }
            ]
        }
    }


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    short_code: str = Field(..., description="The short code")
    short_link: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    created_at: datetime = Field(..., description="Creation timestamp")
    expiry: datetime = Field(..., description="Expiry timestamp")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "short_code": "abc123",
                    "short_link": "http://localhost:5000/abc123",
                    "original_url": "https://example.com/very/long/path",
                    "created_at": "2024-01-01T12:00:00Z",
                    "expiry": "2024-01-01T12:30:00Z"
                }
            ]
        }
    }


class URLStatsEntry(BaseModel):
    """One mapping in the statistics listing."""

    short_code: str
    short_link: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    is_active: bool
    click_count: int
    click_timestamps: List[datetime]


class ClickEvent(BaseModel):
    """A recorded redirect."""

    timestamp: datetime
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None


class URLAnalyticsResponse(BaseModel):
    """Click analytics for a single short code."""

    short_code: str
    original_url: str
    created_at: datetime
    expiry_at: datetime
    is_active: bool
    total_clicks: int
    unique_clicks: int
    recent_clicks: List[ClickEvent]


class SummaryResponse(BaseModel):
    """Service-wide totals."""

    total_urls: int
    live_urls: int
    expired_urls: int
    total_accesses: int
    custom_codes_enabled: bool


class CleanupResponse(BaseModel):
    """Result of a manual cleanup sweep."""

    removed: int = Field(..., description="Number of expired URLs removed")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    registry: str = Field(..., description="Registry status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str = Field(..., description="Error message")
