"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.booking import BookingStatus, PackageType, PaymentStatus


class CreateHoldRequest(BaseModel):
    """Request schema for holding a room."""

    room_id: UUID = Field(..., description="Room to hold")
    check_in: str = Field(..., description="Check-in date (YYYY-MM-DD)")
    check_out: str = Field(..., description="Check-out date (YYYY-MM-DD), exclusive")
    package_type: Optional[PackageType] = Field(None, description="Stay package, defaults to room_only")
    package_add_on: Optional[int] = Field(None, ge=0, description="Expected per-night add-on in minor units")
    guest_name: Optional[str] = Field(None, max_length=255)
    guest_email: Optional[str] = Field(None, max_length=320)
    special_requests: Optional[str] = Field(None, max_length=2000)


class WalkInBookingRequest(CreateHoldRequest):
    """Request schema for a desk booking; the guest name is mandatory."""

    guest_name: str = Field(..., min_length=1, max_length=255)


class BookingIdRequest(BaseModel):
    """Request schema for operations addressing a single booking."""

    booking_id: UUID = Field(..., description="Booking to act on")


class CancelBookingRequest(BookingIdRequest):
    """Request schema for cancelling a booking."""

    reason: Optional[str] = Field(None, max_length=500, description="Why the booking is cancelled")


class UpdateStatusRequest(BookingIdRequest):
    """Request schema for a staff status change."""

    status: BookingStatus = Field(..., description="Requested booking status")


class ListByUserRequest(BaseModel):
    user_id: Optional[UUID] = Field(None, description="Defaults to the caller; other users need room admin")
    status: Optional[BookingStatus] = None


class ListByHotelRequest(BaseModel):
    hotel_id: Optional[UUID] = Field(None, description="Omit to list every hotel (room admin only)")
    status: Optional[BookingStatus] = None


class ListByRoomRequest(BaseModel):
    room_id: UUID
    status: Optional[BookingStatus] = None


class BookingResponse(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Unique booking ID")
    user_id: Optional[UUID] = Field(None, description="Owning customer, absent for walk-ins")
    room_id: UUID
    hotel_id: UUID
    check_in: date
    check_out: date
    status: BookingStatus
    hold_expires_at: Optional[datetime] = Field(None, description="Hold expiration time, only while held")
    payment_status: Optional[PaymentStatus] = None
    price_per_night: int = Field(..., ge=0, description="Snapshot of the room price in minor units")
    package_type: PackageType
    package_add_on: int = Field(..., ge=0)
    total_price: int = Field(..., ge=0)
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    special_requests: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    updated_by: Optional[UUID] = None


class HoldResponse(BaseModel):
    """Response for a new hold."""

    booking_id: UUID
    booking: BookingResponse


class BookingListResponse(BaseModel):
    items: list[BookingResponse]
