"""Legal booking status transitions."""

from ..core.exceptions import InvalidStateError
from ..models.booking import BookingStatus

TERMINAL_STATUSES = frozenset({
    BookingStatus.CHECKED_OUT,
    BookingStatus.CANCELLED,
    BookingStatus.EXPIRED,
})

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.HELD: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.EXPIRED: frozenset(),
}


def is_terminal(status: BookingStatus | str) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def can_transition(current: BookingStatus | str, requested: BookingStatus | str) -> bool:
    """True if ``requested`` is reachable in one step; same-status is not a transition."""
    return BookingStatus(requested) in ALLOWED_TRANSITIONS[BookingStatus(current)]


def validate_transition(current: BookingStatus | str, requested: BookingStatus | str) -> bool:
    """
    Check a requested status change against the transition table.

    Returns:
        False when ``requested`` equals ``current`` (idempotent no-op),
        True when the transition is legal and should be applied

    Raises:
        InvalidStateError: Naming both statuses when the transition is not allowed
    """
    current = BookingStatus(current)
    requested = BookingStatus(requested)

    if current == requested:
        return False

    if not can_transition(current, requested):
        raise InvalidStateError(
            f"Cannot transition booking from '{current.value}' to '{requested.value}'.",
            current_status=current.value,
            requested_status=requested.value,
        )
    return True
