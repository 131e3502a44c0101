"""Background workers for the hotel booking service."""

from .base import BaseWorker
from .hold_expiry_worker import HoldExpiryWorker

__all__ = ["BaseWorker", "HoldExpiryWorker"]
