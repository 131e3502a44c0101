"""Booking router for booking lifecycle operations."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import get_current_user
from ..models.user import User
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.booking import (
    BookingIdRequest,
    BookingListResponse,
    BookingResponse,
    CancelBookingRequest,
    CreateHoldRequest,
    HoldResponse,
    ListByHotelRequest,
    ListByRoomRequest,
    ListByUserRequest,
    UpdateStatusRequest,
    WalkInBookingRequest,
)
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"], responses=PROBLEM_RESPONSES)

# Define dependencies to avoid B008 linting errors
DB_DEPENDENCY = Depends(get_db)
USER_DEPENDENCY = Depends(get_current_user)


def _to_list(bookings) -> BookingListResponse:
    return BookingListResponse(items=[BookingResponse.model_validate(b) for b in bookings])


@router.post("/hold", response_model=HoldResponse)
async def create_hold(
    request: CreateHoldRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> HoldResponse:
    """
    Hold a room for a stay.

    The hold lasts fifteen minutes; confirm it before then or it stops
    blocking the room.
    """
    booking = await BookingService(db).create_hold(user, request)
    return HoldResponse(booking_id=booking.id, booking=BookingResponse.model_validate(booking))


@router.post("/confirm", response_model=BookingResponse)
async def confirm_booking(
    request: BookingIdRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingResponse:
    """Confirm the caller's held booking."""
    booking = await BookingService(db).confirm_booking(user, request.booking_id)
    return BookingResponse.model_validate(booking)


@router.post("/cancel", response_model=BookingResponse)
async def cancel_booking(
    request: CancelBookingRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingResponse:
    """
    Cancel a booking.

    Cancelling an already cancelled or expired booking succeeds without changes.
    """
    booking = await BookingService(db).cancel_booking(user, request.booking_id, reason=request.reason)
    return BookingResponse.model_validate(booking)


@router.post("/update-status", response_model=BookingResponse)
async def update_booking_status(
    request: UpdateStatusRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingResponse:
    """Staff status change (check in, check out, confirm, cancel)."""
    booking = await BookingService(db).update_status(user, request.booking_id, request.status)
    return BookingResponse.model_validate(booking)


@router.post("/accept-cash-payment", response_model=BookingResponse)
async def accept_cash_payment(
    request: BookingIdRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingResponse:
    booking = await BookingService(db).accept_cash_payment(user, request.booking_id)
    return BookingResponse.model_validate(booking)


@router.post("/walk-in", response_model=BookingResponse)
async def create_walk_in(
    request: WalkInBookingRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingResponse:
    """Create a confirmed booking for a guest at the front desk."""
    booking = await BookingService(db).create_walk_in(user, request)
    return BookingResponse.model_validate(booking)


@router.post("/get", response_model=BookingResponse)
async def get_booking(
    request: BookingIdRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingResponse:
    """
    Get booking details.

    This is a read operation and does not modify state.
    """
    booking = await BookingService(db).get_booking(user, request.booking_id)

    logger.info(
        "Booking retrieved successfully",
        extra={"booking_id": str(booking.id), "user_id": str(user.id)}
    )
    return BookingResponse.model_validate(booking)


@router.post("/list-by-user", response_model=BookingListResponse)
async def list_bookings_by_user(
    request: ListByUserRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingListResponse:
    bookings = await BookingService(db).list_by_user(user, user_id=request.user_id, status=request.status)
    return _to_list(bookings)


@router.post("/list-by-hotel", response_model=BookingListResponse)
async def list_bookings_by_hotel(
    request: ListByHotelRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingListResponse:
    bookings = await BookingService(db).list_by_hotel(user, hotel_id=request.hotel_id, status=request.status)
    return _to_list(bookings)


@router.post("/list-by-room", response_model=BookingListResponse)
async def list_bookings_by_room(
    request: ListByRoomRequest,
    user: User = USER_DEPENDENCY,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingListResponse:
    bookings = await BookingService(db).list_by_room(user, request.room_id, status=request.status)
    return _to_list(bookings)
