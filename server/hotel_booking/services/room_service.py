"""Room administration: soft delete guarded by active bookings, and restore."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dates import utcnow
from ..core.exceptions import InvalidStateError, NotFoundError
from ..models.hotel import Room
from ..models.user import User
from .access_service import AccessService
from .audit_service import AuditService
from .availability_service import AvailabilityService

logger = logging.getLogger(__name__)


class RoomService:
    """Service for room operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.access = AccessService(db)
        self.audit = AuditService(db)
        self.availability = AvailabilityService(db)

    async def _get_room_for_change(self, actor: User, room_id: UUID) -> Room:
        """Take the room lock, then read the room and check the caller's access."""
        await self.availability.lock_room(room_id)
        room = await self.db.get(Room, room_id, populate_existing=True)
        if not room:
            raise NotFoundError(resource_type="room", resource_id=str(room_id))

        await self.access.require_hotel_access(actor, room.hotel_id)
        return room

    async def soft_delete_room(self, actor: User, room_id: UUID, now: Optional[datetime] = None) -> Room:
        """
        Mark a room deleted.

        Deleting an already deleted room succeeds without changes.

        Raises:
            NotFoundError: If the room does not exist
            AuthorizationError: Without access to the room's hotel
            InvalidStateError: If the room has an unexpired hold, a confirmed or a checked-in booking
        """
        now = now or utcnow()
        room = await self._get_room_for_change(actor, room_id)

        if room.is_deleted:
            return room

        if await self.availability.has_active_bookings(room.id, now):
            raise InvalidStateError("Cannot delete room with active bookings.")

        room.is_deleted = True
        room.updated_at = now

        self.audit.record(
            actor_id=actor.id,
            action="room_deleted",
            target_type="room",
            target_id=room.id,
            now=now,
            previous_value={"is_deleted": False},
            new_value={"is_deleted": True},
        )
        await self.db.commit()

        logger.info(
            "Room deleted",
            extra={"room_id": str(room.id), "hotel_id": str(room.hotel_id), "actor_id": str(actor.id)}
        )
        return room

    async def restore_room(self, actor: User, room_id: UUID, now: Optional[datetime] = None) -> Room:
        """
        Undo a soft delete. Restoring a room that is not deleted succeeds without changes.

        Raises:
            NotFoundError: If the room does not exist
            AuthorizationError: Without access to the room's hotel
        """
        now = now or utcnow()
        room = await self._get_room_for_change(actor, room_id)

        if not room.is_deleted:
            return room

        room.is_deleted = False
        room.updated_at = now

        self.audit.record(
            actor_id=actor.id,
            action="room_restored",
            target_type="room",
            target_id=room.id,
            now=now,
            previous_value={"is_deleted": True},
            new_value={"is_deleted": False},
        )
        await self.db.commit()

        logger.info(
            "Room restored",
            extra={"room_id": str(room.id), "hotel_id": str(room.hotel_id), "actor_id": str(actor.id)}
        )
        return room
