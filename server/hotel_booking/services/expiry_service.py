"""Sweeper that marks lapsed holds as expired."""

import logging
from datetime import datetime
from typing import NamedTuple, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dates import utcnow
from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingStatus
from .audit_service import AuditService

logger = logging.getLogger(__name__)


class ExpiredHold(NamedTuple):
    booking_id: UUID
    user_id: Optional[UUID]


class HoldExpiryService:
    """Expires held bookings whose hold time has passed."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def find_expired_holds(self, now: datetime) -> list[ExpiredHold]:
        """Held bookings whose hold lapsed before ``now``, oldest first."""
        stmt = (
            select(Booking.id, Booking.user_id)
            .where(
                Booking.status == BookingStatus.HELD,
                Booking.hold_expires_at < now,
            )
            .order_by(Booking.hold_expires_at)
        )
        result = await self.db.execute(stmt)
        return [ExpiredHold(row.id, row.user_id) for row in result]

    async def expire_booking(self, hold: ExpiredHold, now: datetime) -> bool:
        """
        Expire one booking if it is still held, in its own transaction.

        The update is conditioned on ``status = 'held'`` so a booking confirmed
        or cancelled after the sweep query ran is left alone.

        Returns:
            True if this call moved the booking to ``expired``
        """
        stmt = (
            update(Booking)
            .where(Booking.id == hold.booking_id, Booking.status == BookingStatus.HELD)
            .values(status=BookingStatus.EXPIRED, hold_expires_at=None, updated_at=now, version=Booking.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            await self.db.rollback()
            logger.info(
                "Hold changed before expiry - skipping",
                extra={"booking_id": str(hold.booking_id)}
            )
            return False

        # Walk-in bookings have no owning user to attribute the event to
        if hold.user_id is not None:
            self.audit.record(
                actor_id=hold.user_id,
                action="booking_expired",
                target_type="booking",
                target_id=hold.booking_id,
                now=now,
                previous_value={"status": BookingStatus.HELD},
                new_value={"status": BookingStatus.EXPIRED},
                metadata={"system": True, "reason": "hold_timeout"},
            )

        await self.db.commit()
        return True

    async def sweep_expired_holds(self, now: Optional[datetime] = None) -> int:
        """
        Expire every lapsed hold, committing each booking separately.

        A failure on one booking is logged and does not stop the sweep.

        Returns:
            Number of bookings moved to ``expired``
        """
        now = now or utcnow()
        candidates = await self.find_expired_holds(now)
        # Release the read transaction before per-booking writes
        await self.db.commit()

        expired_count = 0
        for hold in candidates:
            try:
                if await self.expire_booking(hold, now):
                    expired_count += 1
            except Exception as e:
                await self.db.rollback()
                logger.error(
                    f"Failed to expire hold: {e!s}",
                    exc_info=True,
                    extra={"booking_id": str(hold.booking_id)}
                )

        if expired_count:
            metrics_collector.record_holds_expired(expired_count)
            logger.info(
                f"Expired {expired_count} holds",
                extra={"expired_count": expired_count, "timestamp": now.isoformat()}
            )
        return expired_count
