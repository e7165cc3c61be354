"""Configuration management for URL shortener."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=5000,
        description="Port to listen on"
    )

    # URL shortener settings
    base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL for generating short URLs"
    )

    path_prefix: str = Field(
        default="",
        description="Path prefix for short URLs (e.g., '/s' for /s/abc123)"
    )

    short_code_length: int = Field(
        default=6,
        ge=3,
        le=10,
        description="Length of generated short codes"
    )

    enable_custom_codes: bool = Field(
        default=True,
        description="Allow users to provide custom short codes"
    )

    max_collision_retries: int = Field(
        default=10,
        ge=1,
        description="Maximum attempts when generating a free short code"
    )

    default_validity_minutes: int = Field(
        default=30,
        ge=1,
        description="Validity of a short URL when the request does not specify one"
    )

    max_validity_minutes: int = Field(
        default=525600,
        ge=1,
        description="Longest validity a request may ask for (525600 = one year)"
    )

    recent_clicks_limit: int = Field(
        default=10,
        ge=0,
        description="Number of recent clicks returned by the analytics endpoint"
    )

    # Cleanup settings
    cleanup_interval_seconds: float = Field(
        default=60,
        ge=0,
        description="Seconds between expired-URL cleanup sweeps (0 disables the sweeper)"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
