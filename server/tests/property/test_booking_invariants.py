"""Property-based tests for booking system invariants."""

from datetime import date, datetime, timedelta

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from hotel_booking.core.dates import (
    MAX_STAY_NIGHTS,
    StayRange,
    hold_expiration,
    is_hold_expired,
    nights_between,
    ranges_overlap,
    validate_stay_dates,
)
from hotel_booking.core.exceptions import InvalidStateError
from hotel_booking.models import Booking, BookingStatus
from hotel_booking.services.availability_service import find_conflict, is_blocking
from hotel_booking.services.state_machine import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, validate_transition

BASE_DAY = date(2024, 3, 1)
NOW = datetime(2024, 2, 20, 12, 0, 0)

# Strategies for generating test data
day_offsets = st.integers(min_value=0, max_value=60)
stay_lengths = st.integers(min_value=1, max_value=14)
statuses = st.sampled_from(list(BookingStatus))
minutes = st.integers(min_value=-120, max_value=120)


@st.composite
def stays(draw) -> StayRange:
    start = BASE_DAY + timedelta(days=draw(day_offsets))
    return StayRange(start, start + timedelta(days=draw(stay_lengths)))


def make_booking(stay: StayRange, status: BookingStatus, hold_expires_at=None) -> Booking:
    return Booking(check_in=stay.check_in, check_out=stay.check_out, status=status, hold_expires_at=hold_expires_at)


@given(a=stays(), b=stays())
def test_overlap_is_symmetric(a, b):
    assert ranges_overlap(a, b) == ranges_overlap(b, a)


@given(a=stays(), b=stays())
def test_overlap_matches_shared_nights(a, b):
    """Two stays overlap exactly when some night belongs to both."""
    nights_a = {a.check_in + timedelta(days=i) for i in range(nights_between(a.check_in, a.check_out))}
    nights_b = {b.check_in + timedelta(days=i) for i in range(nights_between(b.check_in, b.check_out))}
    assert ranges_overlap(a, b) == bool(nights_a & nights_b)


@given(stay=stays(), length=stay_lengths)
def test_back_to_back_stays_never_overlap(stay, length):
    following = StayRange(stay.check_out, stay.check_out + timedelta(days=length))
    assert not ranges_overlap(stay, following)


@given(offset=st.integers(min_value=0, max_value=300), nights=st.integers(min_value=1, max_value=MAX_STAY_NIGHTS))
def test_valid_stays_report_their_night_count(offset, nights):
    check_in = NOW.date() + timedelta(days=offset)
    check_out = check_in + timedelta(days=nights)
    assert validate_stay_dates(check_in.isoformat(), check_out.isoformat(), NOW) == nights


@given(current=statuses, requested=statuses)
def test_transitions_follow_the_table(current, requested):
    if current == requested:
        assert validate_transition(current, requested) is False
    elif requested in ALLOWED_TRANSITIONS[current]:
        assert validate_transition(current, requested) is True
    else:
        with pytest.raises(InvalidStateError):
            validate_transition(current, requested)


@given(terminal=st.sampled_from(sorted(TERMINAL_STATUSES)), requested=statuses)
def test_terminal_statuses_have_no_exit(terminal, requested):
    assume(terminal != requested)
    with pytest.raises(InvalidStateError):
        validate_transition(terminal, requested)


@given(offset=minutes)
def test_hold_lapses_only_after_its_expiry(offset):
    expires_at = hold_expiration(NOW)
    now = expires_at + timedelta(minutes=offset)
    assert is_hold_expired(expires_at, now) == (offset > 0)


@given(stay=stays(), status=statuses, offset=minutes)
def test_only_live_bookings_block(stay, status, offset):
    expires_at = NOW + timedelta(minutes=offset) if status == BookingStatus.HELD else None
    booking = make_booking(stay, status, expires_at)

    expected = status in (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN) or (
        status == BookingStatus.HELD and offset >= 0
    )
    assert is_blocking(booking, NOW) == expected


@given(existing=st.lists(st.tuples(stays(), statuses), max_size=8), requested=stays())
def test_conflict_is_a_blocking_overlapping_booking(existing, requested):
    bookings = [
        make_booking(stay, status, NOW + timedelta(minutes=15) if status == BookingStatus.HELD else None)
        for stay, status in existing
    ]

    conflict = find_conflict(bookings, requested, NOW)

    blockers = [
        b for b in bookings
        if is_blocking(b, NOW) and ranges_overlap(requested, StayRange(b.check_in, b.check_out))
    ]
    if blockers:
        assert conflict is blockers[0]
    else:
        assert conflict is None
