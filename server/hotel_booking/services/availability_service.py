"""Room availability: which bookings block a stay, and which rooms are free."""

import logging
from datetime import date, datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dates import StayRange, is_hold_expired, ranges_overlap
from ..models.booking import Booking, BookingStatus
from ..models.hotel import OperationalStatus, Room, RoomType

logger = logging.getLogger(__name__)

NON_BLOCKING_STATUSES = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.EXPIRED,
    BookingStatus.CHECKED_OUT,
})


def is_blocking(booking: Booking, now: datetime) -> bool:
    """
    Whether a booking still occupies its dates.

    Terminal bookings never block, and neither does a hold whose expiry has
    passed, even if the sweeper has not marked it expired yet.
    """
    if booking.status in NON_BLOCKING_STATUSES:
        return False
    if booking.status == BookingStatus.HELD and is_hold_expired(booking.hold_expires_at, now):
        return False
    return True


def find_conflict(bookings: Iterable[Booking], stay: StayRange, now: datetime) -> Optional[Booking]:
    """First blocking booking overlapping ``stay``, scanning linearly."""
    for booking in bookings:
        if not is_blocking(booking, now):
            continue
        if ranges_overlap(stay, StayRange(booking.check_in, booking.check_out)):
            return booking
    return None


class AvailabilityService:
    """Service for room availability checks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lock_room(self, room_id: UUID) -> None:
        """
        Serialize room checks and booking inserts for one room until the transaction ends.

        Uses a PostgreSQL transaction-scoped advisory lock. Other dialects
        (SQLite in tests) take no lock here.
        """
        if self.db.bind and self.db.bind.dialect.name == "postgresql":
            await self.db.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:room_id))"),
                {"room_id": str(room_id)}
            )
            logger.debug("Acquired advisory lock for room", extra={"room_id": str(room_id)})

    async def get_bookings_for_room(self, room_id: UUID) -> list[Booking]:
        stmt = select(Booking).where(Booking.room_id == room_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def find_conflicting_booking(
        self, room_id: UUID, check_in: date, check_out: date, now: datetime
    ) -> Optional[Booking]:
        bookings = await self.get_bookings_for_room(room_id)
        return find_conflict(bookings, StayRange(check_in, check_out), now)

    async def is_room_free(self, room_id: UUID, check_in: date, check_out: date, now: datetime) -> bool:
        return await self.find_conflicting_booking(room_id, check_in, check_out, now) is None

    async def has_active_bookings(self, room_id: UUID, now: datetime) -> bool:
        """True if any booking for the room is held (unexpired), confirmed or checked in."""
        bookings = await self.get_bookings_for_room(room_id)
        return any(is_blocking(booking, now) for booking in bookings)

    async def check_availability(
        self, room_id: UUID, check_in: date, check_out: date, now: datetime
    ) -> tuple[bool, Optional[str]]:
        """
        Availability of a single room for a stay.

        Returns:
            ``(available, reason)`` where reason explains a negative answer
        """
        room = await self.db.get(Room, room_id)
        if not room or room.is_deleted:
            return False, "Room not found"

        if room.operational_status != OperationalStatus.AVAILABLE:
            return False, f"Room is currently {OperationalStatus(room.operational_status).value}"

        if not await self.is_room_free(room_id, check_in, check_out, now):
            return False, "Room is already booked for these dates"

        return True, None

    async def get_available_rooms(
        self,
        hotel_id: UUID,
        check_in: date,
        check_out: date,
        now: datetime,
        room_type: Optional[RoomType] = None,
        min_occupancy: Optional[int] = None,
    ) -> list[Room]:
        """Bookable rooms of a hotel that are free for the whole stay."""
        stmt = select(Room).where(
            Room.hotel_id == hotel_id,
            Room.operational_status == OperationalStatus.AVAILABLE,
            Room.is_deleted.is_(False),
        )
        if room_type:
            stmt = stmt.where(Room.room_type == room_type)
        if min_occupancy:
            stmt = stmt.where(Room.max_occupancy >= min_occupancy)

        result = await self.db.execute(stmt.order_by(Room.room_number))
        rooms = list(result.scalars())

        available = []
        for room in rooms:
            if await self.is_room_free(room.id, check_in, check_out, now):
                available.append(room)

        logger.info(
            "Available room search completed",
            extra={
                "hotel_id": str(hotel_id),
                "check_in": check_in.isoformat(),
                "check_out": check_out.isoformat(),
                "candidates": len(rooms),
                "available": len(available),
            }
        )
        return available
