"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient, ASGITransport

from config import Config
from shortener.common.logging_config import setup_logging
from shortener.common.validators import RESERVED_WORDS
from shortener.registry import URLRegistry
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from web_app import create_app


class FakeClock:
    """Manually advanced clock for expiry scenarios."""

    def __init__(self, start: datetime = None):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FixedCodeGenerator(ShortCodeGenerator):
    """Hands out a scripted sequence of codes, repeating the last one."""

    def __init__(self, codes, reserved_words=()):
        super().__init__(default_length=6, reserved_words=reserved_words)
        self.codes = list(codes)
        self.calls = 0

    def generate_random(self, length=None):
        code = self.codes[min(self.calls, len(self.codes) - 1)]
        self.calls += 1
        return code


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6, reserved_words=RESERVED_WORDS)


@pytest.fixture
def registry(short_code_generator, clock, logger):
    """Create an empty registry driven by the fake clock."""
    return URLRegistry(
        short_code_generator=short_code_generator,
        max_generation_attempts=10,
        clock=clock,
        logger=logger,
    )


@pytest.fixture
def service(registry, logger):
    """Create service instance."""
    return URLShortenerService(registry=registry, logger=logger)


@pytest.fixture
def config():
    """Create test configuration."""
    return Config(base_url="http://testserver", cleanup_interval_seconds=0)


@pytest.fixture
def app(registry, service, config, logger):
    """Create test FastAPI app."""
    return create_app(
        registry_instance=registry,
        service_instance=service,
        config=config,
        logger=logger,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
