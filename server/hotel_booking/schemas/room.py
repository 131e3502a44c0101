"""Room-related Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.hotel import OperationalStatus, RoomType


class CheckAvailabilityRequest(BaseModel):
    room_id: UUID
    check_in: str = Field(..., description="Check-in date (YYYY-MM-DD)")
    check_out: str = Field(..., description="Check-out date (YYYY-MM-DD), exclusive")


class CheckAvailabilityResponse(BaseModel):
    available: bool
    reason: Optional[str] = Field(None, description="Why the room cannot be booked")


class AvailableRoomsRequest(BaseModel):
    """Request schema for searching free rooms of a hotel."""

    hotel_id: UUID
    check_in: str
    check_out: str
    room_type: Optional[RoomType] = None
    min_occupancy: Optional[int] = Field(None, ge=1)


class RoomIdRequest(BaseModel):
    """Request schema for room delete and restore."""

    room_id: UUID


class RoomResponse(BaseModel):
    """Room response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    hotel_id: UUID
    room_number: str
    room_type: RoomType
    base_price: int = Field(..., ge=0, description="Price per night in minor units")
    max_occupancy: int = Field(..., ge=1)
    operational_status: OperationalStatus
    is_deleted: bool
    updated_at: datetime


class RoomListResponse(BaseModel):
    items: list[RoomResponse]
