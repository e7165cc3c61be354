"""Core business logic for URL shortener."""

from .errors import (
    RegistryError,
    CodeConflictError,
    CodeGenerationExhaustedError,
    RegistryInvariantError,
)
from .models import AccessEvent, URLMapping
from .shortcode import ShortCodeGenerator
from .registry import URLRegistry
from .service import URLShortenerService
from .cleanup import ExpiredMappingSweeper

__all__ = [
    "RegistryError",
    "CodeConflictError",
    "CodeGenerationExhaustedError",
    "RegistryInvariantError",
    "AccessEvent",
    "URLMapping",
    "ShortCodeGenerator",
    "URLRegistry",
    "URLShortenerService",
    "ExpiredMappingSweeper",
]
