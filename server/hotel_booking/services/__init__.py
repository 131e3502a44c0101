"""Service layer package."""

from .access_service import AccessService
from .audit_service import AuditService
from .availability_service import AvailabilityService
from .booking_service import BookingService
from .expiry_service import HoldExpiryService
from .room_service import RoomService

__all__ = [
    "AccessService",
    "AuditService",
    "AvailabilityService",
    "BookingService",
    "HoldExpiryService",
    "RoomService",
]
