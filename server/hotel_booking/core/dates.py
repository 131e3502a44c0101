"""Stay date math: parsing, validation, overlap and hold expiry.

All calendar math is done on UTC-midnight days. Functions here never read the
wall clock themselves except ``utcnow``; callers capture ``now`` once per
operation and pass it down so every comparison in that operation agrees.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .exceptions import ValidationError

HOLD_DURATION = timedelta(minutes=15)
MAX_STAY_NIGHTS = 30
MAX_ADVANCE_BOOKING_DAYS = 365

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ONE_DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class StayRange:
    """Half-open stay ``[check_in, check_out)``."""

    check_in: date
    check_out: date


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_date(value: str) -> date:
    """
    Parse a strict ``YYYY-MM-DD`` string.

    Raises:
        ValueError: If the string is malformed or names an impossible day
    """
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise ValueError(f"Invalid date format: {value!r}")
    return date.fromisoformat(value)


def is_valid_date_format(value: str) -> bool:
    try:
        parse_date(value)
    except ValueError:
        return False
    return True


def nights_between(check_in: date, check_out: date) -> int:
    """Number of nights, rounded up; callers must ensure ``check_out > check_in``."""
    seconds = (check_out - check_in).total_seconds()
    return math.ceil(seconds / _ONE_DAY_SECONDS)


def ranges_overlap(a: StayRange, b: StayRange) -> bool:
    """Half-open overlap: back-to-back stays sharing a turnover day do not overlap."""
    return a.check_in < b.check_out and a.check_out > b.check_in


def validate_stay_dates(check_in: str, check_out: str, now: datetime) -> int:
    """
    Validate a requested stay against booking policy.

    Args:
        check_in: Check-in date as ``YYYY-MM-DD``
        check_out: Check-out date as ``YYYY-MM-DD``
        now: Operation timestamp (naive UTC)

    Returns:
        Number of nights in the stay

    Raises:
        ValidationError: With a distinct message for each failed rule
    """
    if not is_valid_date_format(check_in):
        raise ValidationError("Invalid check-in date format. Use YYYY-MM-DD.", field="check_in")

    if not is_valid_date_format(check_out):
        raise ValidationError("Invalid check-out date format. Use YYYY-MM-DD.", field="check_out")

    check_in_date = parse_date(check_in)
    check_out_date = parse_date(check_out)
    today = now.date()

    if check_in_date < today:
        raise ValidationError("Check-in date cannot be in the past.", field="check_in")

    if check_out_date <= check_in_date:
        raise ValidationError("Check-out date must be after check-in date.", field="check_out")

    nights = nights_between(check_in_date, check_out_date)

    if nights > MAX_STAY_NIGHTS:
        raise ValidationError(
            f"Maximum stay is {MAX_STAY_NIGHTS} nights. Your booking is for {nights} nights.",
            field="check_out",
        )

    if check_in_date > today + timedelta(days=MAX_ADVANCE_BOOKING_DAYS):
        raise ValidationError(
            f"Bookings can only be made up to {MAX_ADVANCE_BOOKING_DAYS} days in advance.",
            field="check_in",
        )

    return nights


def hold_expiration(now: datetime) -> datetime:
    return now + HOLD_DURATION


def is_hold_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    """A hold without an expiry never lapses."""
    if expires_at is None:
        return False
    return now > expires_at
