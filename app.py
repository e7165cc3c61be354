#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: The server handles many connections in one process via async I/O
(FastAPI + uvicorn). All mappings live in one in-memory registry guarded by a
lock, so the service runs as a single process; multiple worker processes would
each hold a separate registry.

Usage:
    python app.py

Environment variables:
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    SHORT_CODE_LENGTH - Length of generated short codes
    DEFAULT_VALIDITY_MINUTES - Validity when a request omits it
    CLEANUP_INTERVAL_SECONDS - Seconds between expired-URL sweeps (0 disables)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortener.cleanup import ExpiredMappingSweeper
from shortener.common.logging_config import setup_logging
from shortener.common.validators import RESERVED_WORDS
from shortener.registry import URLRegistry
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from web_app import create_app


def build_components(config: Config, logger):
    """Construct the registry and the service that wraps it.

    Returns:
        Tuple of (registry, service)
    """
    generator = ShortCodeGenerator(
        default_length=config.short_code_length,
        reserved_words=RESERVED_WORDS,
    )
    registry = URLRegistry(
        short_code_generator=generator,
        max_generation_attempts=config.max_collision_retries,
        logger=logger,
    )
    service = URLShortenerService(
        registry=registry,
        logger=logger,
        enable_custom_codes=config.enable_custom_codes,
        default_validity_minutes=config.default_validity_minutes,
        max_validity_minutes=config.max_validity_minutes,
        recent_clicks_limit=config.recent_clicks_limit,
    )
    return registry, service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")

    # Components are built here unless the app was created with them
    if app.state.service is None:
        registry, service = build_components(config, logger)
        app.state.registry = registry
        app.state.service = service

    sweeper = None
    if config.cleanup_interval_seconds > 0:
        sweeper = ExpiredMappingSweeper(
            registry=app.state.registry,
            interval_seconds=config.cleanup_interval_seconds,
            logger=logger,
        )
        sweeper.start()
    else:
        logger.info("Cleanup sweeper disabled")
    app.state.sweeper = sweeper

    logger.info("Service started successfully")

    # Yield control to the application
    yield

    # Shutdown
    logger.info("Shutting down URL shortener service...")

    if sweeper:
        await sweeper.stop()

    logger.info("Service stopped")


def main():
    """Main entry point."""
    # Load configuration
    config = load_config()

    # Setup logging
    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump()}")

    # Create FastAPI app with lifespan
    app = create_app(
        registry_instance=None,  # Will be set in lifespan
        service_instance=None,
        config=config,
        logger=logger,
    )

    # Override lifespan
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    # Setup signal handlers for graceful shutdown
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    # Run server
    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
