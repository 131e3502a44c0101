"""Actor resolution and hotel-access authorization."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthenticationError, AuthorizationError
from ..models.user import HotelStaff, StaffRole, User, UserRole

logger = logging.getLogger(__name__)


class AccessService:
    """Resolves callers to users and answers who may act on which hotel."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_external_id(self, external_id: str) -> Optional[User]:
        stmt = select(User).where(User.external_id == external_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def require_user(self, external_id: str) -> User:
        """
        Resolve an external identity to an internal user.

        Raises:
            AuthenticationError: If no user is registered for the identity
        """
        user = await self.get_user_by_external_id(external_id)
        if not user:
            logger.warning("Unknown identity", extra={"external_id": external_id})
            raise AuthenticationError()
        return user

    async def get_hotel_assignment(self, user_id: UUID) -> Optional[HotelStaff]:
        stmt = select(HotelStaff).where(HotelStaff.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def has_hotel_access(self, user: User, hotel_id: UUID) -> bool:
        """Room admins reach every hotel; staff only the hotel they are assigned to."""
        if user.role == UserRole.ROOM_ADMIN:
            return True
        assignment = await self.get_hotel_assignment(user.id)
        return assignment is not None and assignment.hotel_id == hotel_id

    async def require_hotel_access(self, user: User, hotel_id: UUID, detail: Optional[str] = None) -> Optional[HotelStaff]:
        """
        Require access to a hotel.

        Returns:
            The caller's staff assignment, or None for room admins

        Raises:
            AuthorizationError: If the caller is neither admin nor assigned here
        """
        assignment = await self.get_hotel_assignment(user.id)
        if user.role == UserRole.ROOM_ADMIN:
            return assignment
        if assignment is None or assignment.hotel_id != hotel_id:
            logger.warning(
                "Hotel access denied",
                extra={"user_id": str(user.id), "hotel_id": str(hotel_id)}
            )
            raise AuthorizationError(detail or "You do not have access to this hotel.")
        return assignment

    async def require_desk_staff(self, user: User) -> HotelStaff:
        """Require a hotel_admin or hotel_cashier assignment; callers check its hotel."""
        assignment = await self.get_hotel_assignment(user.id)
        if assignment is None or assignment.role not in (StaffRole.HOTEL_ADMIN, StaffRole.HOTEL_CASHIER):
            raise AuthorizationError("Only hotel cashiers and hotel admins can create walk-in bookings.")
        return assignment


def require_customer(user: User) -> User:
    if user.role != UserRole.CUSTOMER:
        raise AuthorizationError("Customer access required. Admins cannot perform this action.")
    return user


def require_admin(user: User) -> User:
    if user.role != UserRole.ROOM_ADMIN:
        raise AuthorizationError(
            "Admin access required. You do not have permission to perform this action."
        )
    return user
