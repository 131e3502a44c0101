"""Background worker for expiring holds."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.config import settings
from ..core.database import async_session_factory
from ..core.dates import utcnow
from ..core.observability import get_logger
from ..services.expiry_service import HoldExpiryService
from .base import BaseWorker

logger = get_logger(__name__)


class HoldExpiryWorker(BaseWorker):
    """
    Background worker that expires lapsed holds.

    Bookings and availability already ignore a lapsed hold, so this only
    makes the ``expired`` status durable and visible in listings.
    """

    def __init__(
        self,
        interval_seconds: Optional[int] = None,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        """
        Initialize the hold expiry worker.

        Args:
            interval_seconds: How often to sweep (default: HOLD_SWEEP_INTERVAL_SECONDS)
            session_factory: Session factory, a fresh session is opened per sweep
        """
        super().__init__(
            name="HoldExpiry",
            interval_seconds=interval_seconds or settings.hold_sweep_interval_seconds,
        )
        self.session_factory = session_factory or async_session_factory
        self.last_expired_count = 0

    async def process(self) -> None:
        """Sweep expired holds."""
        async with self.session_factory() as db:
            now = utcnow()
            expired_count = await HoldExpiryService(db).sweep_expired_holds(now)
            self.last_expired_count = expired_count

            logger.info(
                "hold sweep finished",
                worker=self.name,
                expired_count=expired_count,
                timestamp=now.isoformat(),
            )
