import enum
from typing import Optional

from ..utils.errors import InvalidStatus


class BookingStatus(str, enum.Enum):
    """Canonical booking statuses understood by the lifecycle guards."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


TERMINAL_STATUSES = frozenset({
    BookingStatus.CHECKED_OUT,
    BookingStatus.CANCELLED,
    BookingStatus.NO_SHOW,
    BookingStatus.COMPLETED,
})

PRE_ARRIVAL_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

# Statuses that hold inventory: they count against availability and room conflicts.
ACTIVE_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.CHECKED_IN,
})

# Values written by older front-desk screens before the canonical set existed.
LEGACY_STATUS_MAP = {
    "reserved": BookingStatus.CONFIRMED,
    "pre_checkin": BookingStatus.CONFIRMED,
    "pre-checkin": BookingStatus.CONFIRMED,
    "in_house": BookingStatus.CHECKED_IN,
    "in-house": BookingStatus.CHECKED_IN,
    "checked-in": BookingStatus.CHECKED_IN,
    "checkedin": BookingStatus.CHECKED_IN,
    "checked-out": BookingStatus.CHECKED_OUT,
    "checkedout": BookingStatus.CHECKED_OUT,
    "canceled": BookingStatus.CANCELLED,
    "noshow": BookingStatus.NO_SHOW,
    "no-show": BookingStatus.NO_SHOW,
}


def normalize_legacy_status(value: Optional[str]) -> BookingStatus:
    """Map a stored status string onto the canonical ``BookingStatus`` set.

    Matching is case and whitespace insensitive. A missing value is treated
    as ``pending``. Unknown values raise ``InvalidStatus`` rather than being
    guessed at.
    """
    if isinstance(value, BookingStatus):
        return value
    key = (value or "").strip().lower()
    if not key:
        return BookingStatus.PENDING
    if key in LEGACY_STATUS_MAP:
        return LEGACY_STATUS_MAP[key]
    try:
        return BookingStatus(key)
    except ValueError:
        raise InvalidStatus(f"Unknown booking status '{value}'", {"status": "invalid"})
