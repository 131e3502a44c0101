"""Models module exporting all database models."""

from .audit import AuditEvent
from .booking import PACKAGE_ADD_ON, Booking, BookingStatus, PackageType, PaymentStatus
from .hotel import Hotel, OperationalStatus, Room, RoomType
from .user import HotelStaff, StaffRole, User, UserRole

__all__ = [
    # Identity
    "User",
    "UserRole",
    "HotelStaff",
    "StaffRole",

    # Inventory (read by the booking engine)
    "Hotel",
    "Room",
    "RoomType",
    "OperationalStatus",

    # Booking entities
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "PackageType",
    "PACKAGE_ADD_ON",

    # Audit
    "AuditEvent",
]
