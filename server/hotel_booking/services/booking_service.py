"""Booking lifecycle: holds, confirmation, cancellation, staff transitions and payment."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..core.dates import hold_expiration, is_hold_expired, parse_date, utcnow, validate_stay_dates
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    HoldExpiredError,
    InvalidStateError,
    NotFoundError,
    RoomUnavailableError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..models.booking import PACKAGE_ADD_ON, Booking, BookingStatus, PackageType, PaymentStatus
from ..models.hotel import Hotel, OperationalStatus, Room
from ..models.user import User, UserRole
from ..schemas.booking import CreateHoldRequest, WalkInBookingRequest
from .access_service import AccessService, require_customer
from .audit_service import AuditService
from .availability_service import AvailabilityService
from .state_machine import validate_transition

logger = logging.getLogger(__name__)


def resolve_package(package_type: Optional[PackageType], package_add_on: Optional[int]) -> tuple[PackageType, int]:
    """
    Look up the per-night add-on for a package.

    A client-supplied add-on is only accepted if it matches the price table.
    """
    package_type = PackageType(package_type or PackageType.ROOM_ONLY)
    expected = PACKAGE_ADD_ON[package_type]
    if package_add_on is not None and package_add_on != expected:
        raise ValidationError("Invalid package pricing selected. Please try again.", field="package_add_on")
    return package_type, expected


def _status(booking: Booking) -> BookingStatus:
    return BookingStatus(booking.status)


class BookingService:
    """Service for booking lifecycle operations.

    Each mutating method validates every precondition before touching any
    row, then stages the change and its audit event and commits once, so a
    failed call leaves neither a half-updated booking nor an orphan audit row.
    New bookings are inserted under the room lock; existing ones are read
    FOR UPDATE and written with a version check.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.access = AccessService(db)
        self.audit = AuditService(db)
        self.availability = AvailabilityService(db)

    async def _get_live_room(self, room_id: UUID) -> Room:
        """Room that exists and is not deleted, read after the room lock is taken."""
        room = await self.db.get(Room, room_id, populate_existing=True)
        if not room or room.is_deleted:
            raise NotFoundError(resource_type="room", resource_id=str(room_id))
        return room

    @staticmethod
    def _require_operational(room: Room) -> None:
        if room.operational_status != OperationalStatus.AVAILABLE:
            raise RoomUnavailableError(
                room_id=str(room.id),
                operational_status=OperationalStatus(room.operational_status).value,
            )

    async def _ensure_room_free(self, room: Room, check_in, check_out, now: datetime) -> None:
        """Reject the stay if an active booking overlaps it. The caller holds the room lock."""
        conflict = await self.availability.find_conflicting_booking(room.id, check_in, check_out, now)
        if conflict:
            logger.warning(
                "Booking conflict detected",
                extra={
                    "room_id": str(room.id),
                    "check_in": check_in.isoformat(),
                    "check_out": check_out.isoformat(),
                    "conflicting_booking_id": str(conflict.id),
                }
            )
            raise ConflictError()

    async def create_hold(self, customer: User, request: CreateHoldRequest, now: Optional[datetime] = None) -> Booking:
        """
        Hold a room for a stay for fifteen minutes.

        Args:
            customer: Resolved caller, must have the customer role
            request: Room, dates, package and guest details
            now: Operation timestamp, captured once

        Returns:
            The new booking in ``held`` status

        Raises:
            AuthorizationError: If the caller is not a customer
            ValidationError: If the dates or package pricing are invalid
            NotFoundError: If the room or its hotel does not exist
            RoomUnavailableError: If the room is not operationally available
            ConflictError: If an active booking overlaps the stay
        """
        now = now or utcnow()
        require_customer(customer)

        nights = validate_stay_dates(request.check_in, request.check_out, now)
        check_in = parse_date(request.check_in)
        check_out = parse_date(request.check_out)

        await self.availability.lock_room(request.room_id)
        room = await self._get_live_room(request.room_id)
        self._require_operational(room)

        hotel = await self.db.get(Hotel, room.hotel_id, populate_existing=True)
        if not hotel or hotel.is_deleted:
            raise NotFoundError(resource_type="hotel", resource_id=str(room.hotel_id))

        await self._ensure_room_free(room, check_in, check_out, now)

        package_type, package_add_on = resolve_package(request.package_type, request.package_add_on)

        price_per_night = room.base_price
        total_price = (price_per_night + package_add_on) * nights

        booking = Booking(
            user_id=customer.id,
            room_id=room.id,
            hotel_id=room.hotel_id,
            check_in=check_in,
            check_out=check_out,
            status=BookingStatus.HELD,
            hold_expires_at=hold_expiration(now),
            price_per_night=price_per_night,
            package_type=package_type,
            package_add_on=package_add_on,
            total_price=total_price,
            guest_name=request.guest_name,
            guest_email=request.guest_email,
            special_requests=request.special_requests,
            created_at=now,
            updated_at=now,
        )
        self.db.add(booking)
        await self.db.flush()

        self.audit.record(
            actor_id=customer.id,
            action="booking_created",
            target_type="booking",
            target_id=booking.id,
            now=now,
            new_value={
                "status": BookingStatus.HELD,
                "room_id": room.id,
                "check_in": check_in,
                "check_out": check_out,
                "package_type": package_type,
                "package_add_on": package_add_on,
                "total_price": total_price,
            },
        )

        await self.db.commit()

        metrics_collector.record_hold_created(str(room.hotel_id))
        logger.info(
            "Hold created successfully",
            extra={
                "booking_id": str(booking.id),
                "room_id": str(room.id),
                "user_id": str(customer.id),
                "nights": nights,
                "total_price": total_price,
                "hold_expires_at": booking.hold_expires_at.isoformat(),
            }
        )
        return booking

    async def create_walk_in(self, staff: User, request: WalkInBookingRequest, now: Optional[datetime] = None) -> Booking:
        """
        Book a room directly in ``confirmed`` status for a guest at the desk.

        Raises:
            AuthorizationError: Unless the caller is a hotel admin or cashier of the room's hotel
            ValidationError, NotFoundError, RoomUnavailableError, ConflictError: As for holds
        """
        now = now or utcnow()

        assignment = await self.access.require_desk_staff(staff)

        nights = validate_stay_dates(request.check_in, request.check_out, now)
        check_in = parse_date(request.check_in)
        check_out = parse_date(request.check_out)

        await self.availability.lock_room(request.room_id)
        room = await self._get_live_room(request.room_id)
        if assignment.hotel_id != room.hotel_id:
            raise AuthorizationError("You can only create walk-in bookings for your assigned hotel.")
        self._require_operational(room)
        await self._ensure_room_free(room, check_in, check_out, now)

        package_type, package_add_on = resolve_package(request.package_type, request.package_add_on)
        total_price = (room.base_price + package_add_on) * nights

        booking = Booking(
            user_id=None,
            room_id=room.id,
            hotel_id=room.hotel_id,
            check_in=check_in,
            check_out=check_out,
            status=BookingStatus.CONFIRMED,
            hold_expires_at=None,
            payment_status=PaymentStatus.PENDING,
            price_per_night=room.base_price,
            package_type=package_type,
            package_add_on=package_add_on,
            total_price=total_price,
            guest_name=request.guest_name,
            guest_email=request.guest_email,
            special_requests=request.special_requests,
            created_at=now,
            updated_at=now,
            updated_by=staff.id,
        )
        self.db.add(booking)
        await self.db.flush()

        self.audit.record(
            actor_id=staff.id,
            action="walk_in_booking_created",
            target_type="booking",
            target_id=booking.id,
            now=now,
            new_value={
                "status": BookingStatus.CONFIRMED,
                "room_id": room.id,
                "check_in": check_in,
                "check_out": check_out,
                "package_type": package_type,
                "package_add_on": package_add_on,
                "total_price": total_price,
                "guest_name": request.guest_name,
            },
        )

        await self.db.commit()

        metrics_collector.record_walk_in(str(room.hotel_id))
        logger.info(
            "Walk-in booking created",
            extra={
                "booking_id": str(booking.id),
                "room_id": str(room.id),
                "staff_id": str(staff.id),
                "nights": nights,
            }
        )
        return booking

    async def confirm_booking(self, customer: User, booking_id: UUID, now: Optional[datetime] = None) -> Booking:
        """
        Confirm the caller's own held booking before the hold lapses.

        Raises:
            NotFoundError: If the booking does not exist
            AuthorizationError: If the caller does not own the booking
            InvalidStateError: If the booking is not held
            HoldExpiredError: If the hold time has elapsed
        """
        now = now or utcnow()
        require_customer(customer)
        booking = await self.get_booking_for_update_or_raise(booking_id)

        if booking.user_id != customer.id:
            raise AuthorizationError("You can only confirm your own bookings.")

        previous_status = _status(booking)
        if previous_status != BookingStatus.HELD:
            raise InvalidStateError(
                f"Cannot confirm booking with status '{previous_status.value}'. "
                "Only held bookings can be confirmed.",
                current_status=previous_status.value,
                requested_status=BookingStatus.CONFIRMED.value,
            )

        if is_hold_expired(booking.hold_expires_at, now):
            logger.warning(
                "Booking confirmation failed - hold expired",
                extra={
                    "booking_id": str(booking_id),
                    "expired_at": booking.hold_expires_at.isoformat(),
                    "now": now.isoformat(),
                }
            )
            raise HoldExpiredError(str(booking_id), booking.hold_expires_at)

        self._apply_confirmation(booking)
        booking.updated_at = now
        booking.updated_by = customer.id

        self.audit.record(
            actor_id=customer.id,
            action="booking_confirmed",
            target_type="booking",
            target_id=booking.id,
            now=now,
            previous_value={"status": previous_status},
            new_value={"status": BookingStatus.CONFIRMED, "payment_status": booking.payment_status},
        )
        await self._commit_booking_change(booking_id)

        metrics_collector.record_booking_confirmed(str(booking.hotel_id), source="customer")
        logger.info("Booking confirmed successfully", extra={"booking_id": str(booking.id)})
        return booking

    @staticmethod
    def _apply_confirmation(booking: Booking) -> None:
        """Side effects of held -> confirmed shared by customer and staff paths."""
        booking.status = BookingStatus.CONFIRMED
        booking.hold_expires_at = None
        if not booking.payment_status:
            booking.payment_status = PaymentStatus.PENDING

    async def cancel_booking(
        self, actor: User, booking_id: UUID, reason: Optional[str] = None, now: Optional[datetime] = None
    ) -> Booking:
        """
        Cancel a booking; cancelling an already cancelled or expired booking is a no-op.

        The owner, a room admin, or staff assigned to the booking's hotel may cancel.

        Raises:
            NotFoundError: If the booking does not exist
            AuthorizationError: If the caller may not cancel it
            InvalidStateError: If the guest has already checked out
        """
        now = now or utcnow()
        booking = await self.get_booking_for_update_or_raise(booking_id)

        is_owner = booking.user_id is not None and booking.user_id == actor.id
        if not is_owner and not await self.access.has_hotel_access(actor, booking.hotel_id):
            raise AuthorizationError("You do not have permission to cancel this booking.")

        previous_status = _status(booking)
        if previous_status in (BookingStatus.CANCELLED, BookingStatus.EXPIRED):
            logger.info(
                "Booking already in terminal state - cancel is a no-op",
                extra={"booking_id": str(booking_id), "status": previous_status.value}
            )
            return booking

        if previous_status == BookingStatus.CHECKED_OUT:
            raise InvalidStateError(
                "Cannot cancel a completed booking.",
                current_status=previous_status.value,
                requested_status=BookingStatus.CANCELLED.value,
            )

        booking.status = BookingStatus.CANCELLED
        booking.hold_expires_at = None
        booking.updated_at = now
        booking.updated_by = actor.id

        self.audit.record(
            actor_id=actor.id,
            action="booking_cancelled",
            target_type="booking",
            target_id=booking.id,
            now=now,
            previous_value={"status": previous_status},
            new_value={"status": BookingStatus.CANCELLED},
            metadata={"reason": reason} if reason else None,
        )
        await self._commit_booking_change(booking_id)

        metrics_collector.record_booking_cancelled(previous_status.value)
        logger.info(
            "Booking cancelled successfully",
            extra={
                "booking_id": str(booking_id),
                "previous_status": previous_status.value,
                "actor_id": str(actor.id),
                "reason": reason,
            }
        )
        return booking

    async def update_status(
        self, staff: User, booking_id: UUID, next_status: BookingStatus, now: Optional[datetime] = None
    ) -> Booking:
        """
        Move a booking along the lifecycle on behalf of hotel staff or a room admin.

        Unlike ``confirm_booking`` this does not re-check hold expiry or
        ownership: staff may confirm a hold whose time has lapsed as long as
        the sweeper has not yet marked it expired.

        Raises:
            NotFoundError: If the booking does not exist
            AuthorizationError: Without access to the booking's hotel
            InvalidStateError: If the transition is not in the lifecycle table
        """
        now = now or utcnow()
        booking = await self.get_booking_for_update_or_raise(booking_id)

        if not await self.access.has_hotel_access(staff, booking.hotel_id):
            raise AuthorizationError("You do not have permission to update this booking status.")

        previous_status = _status(booking)
        next_status = BookingStatus(next_status)
        if not validate_transition(previous_status, next_status):
            return booking

        if previous_status == BookingStatus.HELD and next_status == BookingStatus.CONFIRMED:
            self._apply_confirmation(booking)
        else:
            booking.status = next_status
            booking.hold_expires_at = None
        booking.updated_at = now
        booking.updated_by = staff.id

        self.audit.record(
            actor_id=staff.id,
            action="booking_status_updated",
            target_type="booking",
            target_id=booking.id,
            now=now,
            previous_value={"status": previous_status},
            new_value={"status": next_status},
        )
        await self._commit_booking_change(booking_id)

        metrics_collector.record_status_transition(previous_status.value, next_status.value)
        if next_status == BookingStatus.CONFIRMED:
            metrics_collector.record_booking_confirmed(str(booking.hotel_id), source="staff")
        logger.info(
            "Booking status updated",
            extra={
                "booking_id": str(booking_id),
                "from_status": previous_status.value,
                "to_status": next_status.value,
                "staff_id": str(staff.id),
            }
        )
        return booking

    async def accept_cash_payment(self, staff: User, booking_id: UUID, now: Optional[datetime] = None) -> Booking:
        """
        Mark a booking paid in cash; already-paid bookings are left untouched.

        Raises:
            NotFoundError: If the booking does not exist
            AuthorizationError: Without access to the booking's hotel
            InvalidStateError: If the booking is cancelled or expired
        """
        now = now or utcnow()
        booking = await self.get_booking_for_update_or_raise(booking_id)

        if not await self.access.has_hotel_access(staff, booking.hotel_id):
            raise AuthorizationError("You do not have permission to update payment status.")

        if booking.payment_status == PaymentStatus.PAID:
            return booking

        status = _status(booking)
        if status in (BookingStatus.CANCELLED, BookingStatus.EXPIRED):
            raise InvalidStateError(
                "Cannot accept payment for cancelled or expired bookings.",
                current_status=status.value,
            )

        previous_payment_status = booking.payment_status or PaymentStatus.PENDING
        booking.payment_status = PaymentStatus.PAID
        booking.updated_at = now
        booking.updated_by = staff.id

        self.audit.record(
            actor_id=staff.id,
            action="booking_payment_paid_cash",
            target_type="booking",
            target_id=booking.id,
            now=now,
            previous_value={"payment_status": previous_payment_status},
            new_value={"payment_status": PaymentStatus.PAID},
        )
        await self._commit_booking_change(booking_id)

        metrics_collector.record_cash_payment()
        logger.info(
            "Cash payment accepted",
            extra={"booking_id": str(booking_id), "staff_id": str(staff.id)}
        )
        return booking

    async def get_booking(self, actor: User, booking_id: UUID) -> Booking:
        """
        Read one booking.

        Customers see their own bookings, plus any booking at the hotel they
        are assigned to as staff; room admins see everything.
        """
        booking = await self.get_booking_by_id_or_raise(booking_id)
        if actor.role == UserRole.CUSTOMER and booking.user_id != actor.id:
            assignment = await self.access.get_hotel_assignment(actor.id)
            if assignment is None or assignment.hotel_id != booking.hotel_id:
                raise AuthorizationError("You can only view your own bookings.")
        return booking

    async def list_by_user(
        self, actor: User, user_id: Optional[UUID] = None, status: Optional[BookingStatus] = None
    ) -> list[Booking]:
        """Bookings of the caller, or of ``user_id`` when the caller is a room admin."""
        target_user_id = actor.id
        if user_id and user_id != actor.id:
            if actor.role != UserRole.ROOM_ADMIN:
                raise AuthorizationError("You can only view your own bookings.")
            target_user_id = user_id

        return await self._list(Booking.user_id == target_user_id, status)

    async def list_by_hotel(
        self, actor: User, hotel_id: Optional[UUID] = None, status: Optional[BookingStatus] = None
    ) -> list[Booking]:
        """Bookings of one hotel; omitting the hotel lists all hotels (room admins only)."""
        if hotel_id is not None:
            await self.access.require_hotel_access(actor, hotel_id)
            return await self._list(Booking.hotel_id == hotel_id, status)

        if actor.role != UserRole.ROOM_ADMIN:
            raise AuthorizationError("Only room admin can list bookings across all hotels.")
        return await self._list(None, status)

    async def list_by_room(
        self, actor: User, room_id: UUID, status: Optional[BookingStatus] = None
    ) -> list[Booking]:
        room = await self.db.get(Room, room_id)
        if not room:
            raise NotFoundError(resource_type="room", resource_id=str(room_id))

        await self.access.require_hotel_access(actor, room.hotel_id)
        return await self._list(Booking.room_id == room_id, status)

    async def _list(self, condition, status: Optional[BookingStatus]) -> list[Booking]:
        stmt = select(Booking)
        if condition is not None:
            stmt = stmt.where(condition)
        if status:
            stmt = stmt.where(Booking.status == BookingStatus(status))
        stmt = stmt.order_by(Booking.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def get_booking_by_id(self, booking_id: UUID) -> Booking | None:
        """Get booking by ID, reloading it if the session already holds a copy."""
        # The sweeper updates rows in bulk, bypassing the identity map
        stmt = select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_by_id_or_raise(self, booking_id: UUID) -> Booking:
        """Get booking by ID or raise NotFoundError."""
        booking = await self.get_booking_by_id(booking_id)
        if not booking:
            logger.warning("Booking not found", extra={"booking_id": str(booking_id)})
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))
        return booking

    async def get_booking_for_update_or_raise(self, booking_id: UUID) -> Booking:
        """
        Get a booking for a read-modify-write, locking its row until the transaction ends.

        FOR UPDATE is dropped on SQLite; there the ``version`` check on commit
        rejects a write based on a stale read.
        """
        stmt = (
            select(Booking)
            .where(Booking.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        booking = result.scalar_one_or_none()
        if not booking:
            logger.warning("Booking not found", extra={"booking_id": str(booking_id)})
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))
        return booking

    async def _commit_booking_change(self, booking_id: UUID) -> None:
        try:
            await self.db.commit()
        except StaleDataError:
            await self.db.rollback()
            logger.warning(
                "Booking changed by a concurrent request - write rejected",
                extra={"booking_id": str(booking_id)}
            )
            raise InvalidStateError("This booking was changed by another request. Please try again.")
