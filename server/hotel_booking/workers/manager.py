"""Lifecycle of the background workers running inside the API process."""

import asyncio
from typing import Any, Dict, Optional

from ..core.observability import get_logger
from .base import BaseWorker
from .hold_expiry_worker import HoldExpiryWorker

logger = get_logger(__name__)


class WorkerManager:
    """Starts, stops and reports on named workers; started from the app lifespan."""

    def __init__(self, workers: Optional[Dict[str, BaseWorker]] = None):
        self.workers: Dict[str, BaseWorker] = workers if workers is not None else {
            "hold_expiry": HoldExpiryWorker(),
        }
        logger.info("workers registered", workers=sorted(self.workers))

    async def start_all(self) -> None:
        # A worker that fails to start must not keep the API from serving
        for name, worker in self.workers.items():
            try:
                await worker.start()
            except Exception as e:
                logger.error("failed to start worker", worker=name, error=str(e), exc_info=True)

    async def stop_all(self) -> None:
        names = list(self.workers)
        results = await asyncio.gather(
            *(self.workers[name].stop() for name in names),
            return_exceptions=True,
        )
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error("error stopping worker", worker=name, error=str(result))

    def get_worker(self, name: str) -> BaseWorker:
        """
        Look up a worker by its registered name.

        Raises:
            KeyError: If no worker is registered under ``name``
        """
        return self.workers[name]

    def get_worker_status(self) -> Dict[str, Dict[str, Any]]:
        """Running flag and interval per worker, plus the last sweep size for the hold sweeper."""
        status: Dict[str, Dict[str, Any]] = {}
        for name, worker in self.workers.items():
            status[name] = {"running": worker.is_running, "interval_seconds": worker.interval_seconds}
            if isinstance(worker, HoldExpiryWorker):
                status[name]["last_expired_count"] = worker.last_expired_count
        return status


worker_manager = WorkerManager()
