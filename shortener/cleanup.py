"""Periodic sweep of expired mappings."""

import asyncio
import logging
from typing import Optional

from .registry import URLRegistry


class ExpiredMappingSweeper:
    """Runs ``URLRegistry.cleanup_expired`` on a fixed interval.

    The registry owns the sweep logic; this class only schedules it on the
    running event loop.
    """

    def __init__(
        self,
        registry: URLRegistry,
        interval_seconds: float = 60,
        logger: Optional[logging.Logger] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.registry = registry
        self.interval_seconds = interval_seconds
        self.logger = logger or logging.getLogger(__name__)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_once(self) -> int:
        """Run one cleanup pass and log what it removed."""
        removed = self.registry.cleanup_expired()
        if removed:
            self.logger.info(f"Cleanup sweep removed {removed} expired URLs")
        return removed

    def start(self) -> None:
        """Start the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        self.logger.info(f"Cleanup sweeper started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.logger.info("Cleanup sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.sweep_once()
            except Exception:
                self.logger.exception("Cleanup sweep failed")
