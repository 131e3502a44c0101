"""Base worker class for background tasks."""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Optional

from ..core.observability import get_logger

logger = get_logger(__name__)


class BaseWorker(ABC):
    """
    Abstract base class for background workers.

    Runs ``process`` on a fixed interval until stopped. A failing iteration
    is logged and the loop carries on with the next one.
    """

    def __init__(self, name: str, interval_seconds: int = 60):
        """
        Initialize the worker.

        Args:
            name: Worker name for logging
            interval_seconds: How often to run the task
        """
        self.name = name
        self.interval_seconds = interval_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @abstractmethod
    async def process(self) -> None:
        """Process one iteration of the background task."""

    async def start(self) -> None:
        """Start the worker."""
        if self._running:
            logger.warning("worker already running", worker=self.name)
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info("worker started", worker=self.name, interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the worker gracefully."""
        if not self._running:
            logger.warning("worker not running", worker=self.name)
            return

        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("worker stopped", worker=self.name)

    async def run_once(self) -> bool:
        """
        Run a single iteration, logging instead of raising on failure.

        Returns:
            True if the iteration completed
        """
        started = time.monotonic()
        try:
            await self.process()
        except Exception as e:
            logger.error("worker iteration failed", worker=self.name, error=str(e), exc_info=True)
            return False

        logger.info(
            "worker iteration completed",
            worker=self.name,
            duration_seconds=round(time.monotonic() - started, 3),
        )
        return True

    async def _run(self) -> None:
        """Main worker loop."""
        logger.info("worker loop started", worker=self.name)

        while self._running:
            try:
                started = time.monotonic()
                await self.run_once()

                # Sleep for the remaining interval time
                sleep_time = max(0.0, self.interval_seconds - (time.monotonic() - started))
                if sleep_time > 0:
                    await asyncio.sleep(sleep_time)

            except asyncio.CancelledError:
                logger.info("worker loop cancelled", worker=self.name)
                break
