"""Unit tests for availability checks."""

from datetime import date, timedelta

import pytest

from hotel_booking.core.dates import StayRange
from hotel_booking.models import Booking, BookingStatus, OperationalStatus, RoomType
from hotel_booking.services.availability_service import AvailabilityService, find_conflict, is_blocking

from factories import FIXED_NOW, add_booking, add_room

MARCH_1 = date(2024, 3, 1)
MARCH_3 = date(2024, 3, 3)


def _booking(status, hold_expires_at=None, check_in=MARCH_1, check_out=MARCH_3) -> Booking:
    return Booking(status=status, hold_expires_at=hold_expires_at, check_in=check_in, check_out=check_out)


class TestIsBlocking:
    @pytest.mark.parametrize("status", [BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN])
    def test_active_statuses_block(self, status):
        assert is_blocking(_booking(status), FIXED_NOW)

    @pytest.mark.parametrize(
        "status", [BookingStatus.CANCELLED, BookingStatus.EXPIRED, BookingStatus.CHECKED_OUT]
    )
    def test_terminal_statuses_never_block(self, status):
        assert not is_blocking(_booking(status), FIXED_NOW)

    def test_live_hold_blocks(self):
        booking = _booking(BookingStatus.HELD, hold_expires_at=FIXED_NOW + timedelta(minutes=5))
        assert is_blocking(booking, FIXED_NOW)

    def test_lapsed_hold_does_not_block_before_the_sweep(self):
        booking = _booking(BookingStatus.HELD, hold_expires_at=FIXED_NOW - timedelta(seconds=1))
        assert not is_blocking(booking, FIXED_NOW)

    def test_plain_string_status_from_the_database(self):
        assert not is_blocking(_booking("cancelled"), FIXED_NOW)
        assert is_blocking(_booking("confirmed"), FIXED_NOW)


def test_find_conflict_returns_first_overlapping_blocker():
    cancelled = _booking(BookingStatus.CANCELLED)
    adjacent = _booking(BookingStatus.CONFIRMED, check_in=MARCH_3, check_out=date(2024, 3, 5))
    blocker = _booking(BookingStatus.CONFIRMED, check_in=date(2024, 2, 28), check_out=date(2024, 3, 2))

    stay = StayRange(MARCH_1, MARCH_3)
    assert find_conflict([cancelled, adjacent, blocker], stay, FIXED_NOW) is blocker
    assert find_conflict([cancelled, adjacent], stay, FIXED_NOW) is None


@pytest.mark.asyncio
async def test_check_availability_reasons(test_session, hotel, room, customer):
    service = AvailabilityService(test_session)

    assert await service.check_availability(room.id, MARCH_1, MARCH_3, FIXED_NOW) == (True, None)

    await add_booking(test_session, room, customer, MARCH_1, MARCH_3)
    available, reason = await service.check_availability(room.id, date(2024, 3, 2), date(2024, 3, 4), FIXED_NOW)
    assert not available
    assert reason == "Room is already booked for these dates"

    cleaning = await add_room(test_session, hotel, "102", operational_status=OperationalStatus.CLEANING)
    available, reason = await service.check_availability(cleaning.id, MARCH_1, MARCH_3, FIXED_NOW)
    assert not available
    assert reason == "Room is currently cleaning"


@pytest.mark.asyncio
async def test_check_availability_missing_or_deleted_room(test_session, hotel):
    service = AvailabilityService(test_session)
    deleted = await add_room(test_session, hotel, "999", is_deleted=True)

    assert await service.check_availability(deleted.id, MARCH_1, MARCH_3, FIXED_NOW) == (False, "Room not found")


@pytest.mark.asyncio
async def test_get_available_rooms_filters(test_session, hotel, customer):
    booked = await add_room(test_session, hotel, "101", room_type=RoomType.STANDARD, max_occupancy=2)
    free_suite = await add_room(test_session, hotel, "201", room_type=RoomType.SUITE, max_occupancy=4)
    free_budget = await add_room(test_session, hotel, "301", room_type=RoomType.BUDGET, max_occupancy=1)
    await add_room(test_session, hotel, "401", operational_status=OperationalStatus.MAINTENANCE)
    await add_room(test_session, hotel, "501", is_deleted=True)
    await add_booking(test_session, booked, customer, MARCH_1, MARCH_3)

    service = AvailabilityService(test_session)

    rooms = await service.get_available_rooms(hotel.id, MARCH_1, MARCH_3, FIXED_NOW)
    assert [r.id for r in rooms] == [free_suite.id, free_budget.id]

    rooms = await service.get_available_rooms(hotel.id, MARCH_1, MARCH_3, FIXED_NOW, room_type=RoomType.SUITE)
    assert [r.id for r in rooms] == [free_suite.id]

    rooms = await service.get_available_rooms(hotel.id, MARCH_1, MARCH_3, FIXED_NOW, min_occupancy=2)
    assert [r.id for r in rooms] == [free_suite.id]

    # The booked room frees up for the next stay
    rooms = await service.get_available_rooms(hotel.id, MARCH_3, date(2024, 3, 5), FIXED_NOW)
    assert booked.id in {r.id for r in rooms}


@pytest.mark.asyncio
async def test_has_active_bookings_ignores_lapsed_holds(test_session, room, customer):
    service = AvailabilityService(test_session)
    await add_booking(
        test_session, room, customer, MARCH_1, MARCH_3,
        status=BookingStatus.HELD, hold_expires_at=FIXED_NOW - timedelta(minutes=1),
    )
    assert not await service.has_active_bookings(room.id, FIXED_NOW)

    await add_booking(test_session, room, customer, date(2024, 3, 10), date(2024, 3, 12), status=BookingStatus.CHECKED_IN)
    assert await service.has_active_bookings(room.id, FIXED_NOW)
