"""Room router for availability queries and room administration."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dates import parse_date, utcnow
from ..core.dependencies import get_current_user
from ..core.exceptions import ValidationError
from ..models.user import User
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.room import (
    AvailableRoomsRequest,
    CheckAvailabilityRequest,
    CheckAvailabilityResponse,
    RoomIdRequest,
    RoomListResponse,
    RoomResponse,
)
from ..services.availability_service import AvailabilityService
from ..services.room_service import RoomService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/room", tags=["room"], responses=PROBLEM_RESPONSES)

DB_DEPENDENCY = Depends(get_db)
USER_DEPENDENCY = Depends(get_current_user)


def _parse_stay(check_in: str, check_out: str):
    try:
        start, end = parse_date(check_in), parse_date(check_out)
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD.")
    if end <= start:
        raise ValidationError("Check-out date must be after check-in date.", field="check_out")
    return start, end


@router.post("/check-availability", response_model=CheckAvailabilityResponse)
async def check_availability(
    request: CheckAvailabilityRequest,
    db: AsyncSession = DB_DEPENDENCY,
) -> CheckAvailabilityResponse:
    """
    Check whether a single room can be booked for a stay.

    Expired holds that the sweeper has not processed yet do not block the room.
    """
    check_in, check_out = _parse_stay(request.check_in, request.check_out)
    available, reason = await AvailabilityService(db).check_availability(
        request.room_id, check_in, check_out, utcnow()
    )
    return CheckAvailabilityResponse(available=available, reason=reason)


@router.post("/available", response_model=RoomListResponse)
async def available_rooms(
    request: AvailableRoomsRequest,
    db: AsyncSession = DB_DEPENDENCY,
) -> RoomListResponse:
    """Rooms of a hotel free for the whole stay."""
    check_in, check_out = _parse_stay(request.check_in, request.check_out)
    rooms = await AvailabilityService(db).get_available_rooms(
        request.hotel_id,
        check_in,
        check_out,
        utcnow(),
        room_type=request.room_type,
        min_occupancy=request.min_occupancy,
    )
    return RoomListResponse(items=[RoomResponse.model_validate(room) for room in rooms])


@router.post("/delete", response_model=RoomResponse)
async def delete_room(
    request: RoomIdRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> RoomResponse:
    """Soft delete a room that has no active bookings."""
    room = await RoomService(db).soft_delete_room(user, request.room_id)
    return RoomResponse.model_validate(room)


@router.post("/restore", response_model=RoomResponse)
async def restore_room(
    request: RoomIdRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> RoomResponse:
    """Bring a soft-deleted room back; restoring a live room changes nothing."""
    room = await RoomService(db).restore_room(user, request.room_id)
    return RoomResponse.model_validate(room)
