"""Hotel and room models.

The booking engine only reads these rows (existence, soft-delete flag,
operational status, base price); the one write is the guarded room soft delete.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import Booking


class RoomType(str, Enum):
    BUDGET = "budget"
    STANDARD = "standard"
    SUITE = "suite"
    DELUXE = "deluxe"


class OperationalStatus(str, Enum):
    """Housekeeping state; only ``available`` rooms accept new bookings."""
    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    CLEANING = "cleaning"
    OUT_OF_ORDER = "out_of_order"


class Hotel(Base):
    __tablename__ = "hotels"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(128), nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    rooms: Mapped[list["Room"]] = relationship("Room", back_populates="hotel")

    def __repr__(self) -> str:
        return f"<Hotel(id={self.id}, name='{self.name}', is_deleted={self.is_deleted})>"


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    hotel_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    room_number: Mapped[str] = mapped_column(String(32), nullable=False)
    room_type: Mapped[RoomType] = mapped_column(String(20), nullable=False)

    # Minor units (cents)
    base_price: Mapped[int] = mapped_column(Integer, nullable=False)
    max_occupancy: Mapped[int] = mapped_column(Integer, nullable=False)
    operational_status: Mapped[OperationalStatus] = mapped_column(
        String(20),
        nullable=False,
        default=OperationalStatus.AVAILABLE,
        index=True
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_room_base_price_non_negative"),
        CheckConstraint("max_occupancy > 0", name="ck_room_max_occupancy_positive"),
    )

    hotel: Mapped["Hotel"] = relationship("Hotel", back_populates="rooms")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="room")

    def __repr__(self) -> str:
        return (
            f"<Room(id={self.id}, hotel_id={self.hotel_id}, number='{self.room_number}', "
            f"status={self.operational_status}, is_deleted={self.is_deleted})>"
        )
