"""Booking model definition."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .hotel import Room


class BookingStatus(str, Enum):
    """Booking lifecycle status."""
    HELD = "held"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PaymentStatus(str, Enum):
    """Payment axis, independent of the lifecycle status."""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PackageType(str, Enum):
    ROOM_ONLY = "room_only"
    WITH_BREAKFAST = "with_breakfast"
    FULL_PACKAGE = "full_package"


# Per-night add-on in minor units
PACKAGE_ADD_ON = {
    PackageType.ROOM_ONLY: 0,
    PackageType.WITH_BREAKFAST: 1500,
    PackageType.FULL_PACKAGE: 4000,
}


class Booking(Base):
    """A room reservation over the half-open stay ``[check_in, check_out)``."""

    __tablename__ = "bookings"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Walk-in bookings have no customer account
    user_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    room_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Denormalized from the room for hotel-scoped queries
    hotel_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[BookingStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.HELD,
        index=True
    )
    hold_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    payment_status: Mapped[Optional[PaymentStatus]] = mapped_column(String(20), nullable=True)

    # Snapshotted at creation, minor units
    price_per_night: Mapped[int] = mapped_column(Integer, nullable=False)
    package_type: Mapped[PackageType] = mapped_column(
        String(20),
        nullable=False,
        default=PackageType.ROOM_ONLY
    )
    package_add_on: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)

    guest_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    guest_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_by: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    # Bumped on every write; a stale read fails its UPDATE with StaleDataError
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_booking_check_out_after_check_in"),
        CheckConstraint("price_per_night >= 0", name="ck_booking_price_per_night_non_negative"),
        CheckConstraint("package_add_on >= 0", name="ck_booking_package_add_on_non_negative"),
        CheckConstraint("total_price >= 0", name="ck_booking_total_price_non_negative"),
        CheckConstraint(
            "(status = 'held') = (hold_expires_at IS NOT NULL)",
            name="ck_booking_hold_expiry_iff_held"
        ),
    )
    __mapper_args__ = {"version_id_col": version}

    room: Mapped["Room"] = relationship("Room", back_populates="bookings")

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, room_id={self.room_id}, stay={self.check_in}..{self.check_out}, "
            f"status={self.status}, hold_expires_at={self.hold_expires_at})>"
        )
