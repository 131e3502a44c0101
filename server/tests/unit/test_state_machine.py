"""Unit tests for booking status transitions."""

import pytest

from hotel_booking.core.exceptions import InvalidStateError
from hotel_booking.models.booking import BookingStatus
from hotel_booking.services.state_machine import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    can_transition,
    is_terminal,
    validate_transition,
)


@pytest.mark.parametrize(
    "current,requested",
    [
        (BookingStatus.HELD, BookingStatus.CONFIRMED),
        (BookingStatus.HELD, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
        (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT),
    ],
)
def test_legal_transitions(current, requested):
    assert validate_transition(current, requested) is True


@pytest.mark.parametrize(
    "current,requested",
    [
        (BookingStatus.HELD, BookingStatus.CHECKED_IN),
        (BookingStatus.HELD, BookingStatus.EXPIRED),
        (BookingStatus.CHECKED_IN, BookingStatus.CONFIRMED),
        (BookingStatus.CHECKED_IN, BookingStatus.CANCELLED),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.EXPIRED, BookingStatus.HELD),
    ],
)
def test_illegal_transitions_name_both_statuses(current, requested):
    with pytest.raises(InvalidStateError) as exc_info:
        validate_transition(current, requested)

    assert exc_info.value.message == f"Cannot transition booking from '{current.value}' to '{requested.value}'."
    assert exc_info.value.problem_details["current_status"] == current.value
    assert exc_info.value.problem_details["requested_status"] == requested.value


@pytest.mark.parametrize("status", list(BookingStatus))
def test_same_status_is_a_no_op(status):
    assert validate_transition(status, status) is False


def test_accepts_plain_strings_from_the_database():
    assert validate_transition("confirmed", "checked_in") is True
    assert can_transition("held", "confirmed")
    assert is_terminal("expired")


def test_terminal_statuses_have_no_outgoing_edges():
    for status in TERMINAL_STATUSES:
        assert ALLOWED_TRANSITIONS[status] == frozenset()
    assert not is_terminal(BookingStatus.CHECKED_IN)
