import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from .. import models
from ..utils.errors import InvalidRange
from .rate_resolver import load_room_type, stay_nights

logger = logging.getLogger(__name__)


@dataclass
class Availability:
    available: bool
    remaining_rooms: int
    message: str


def _overlaps(booking: models.Booking, check_in: date, check_out: date) -> bool:
    return booking.check_in < check_out and booking.check_out > check_in


def check_availability(
    db: Session,
    property_id: int,
    room_type_id: int,
    check_in: date,
    check_out: date,
    guests: int,
) -> Availability:
    """Count rooms of a type still free over ``[check_in, check_out)``."""
    stay_nights(check_in, check_out)
    if guests is None or guests < 1:
        raise InvalidRange("At least one guest is required", {"total_guests": "must_be_positive"})
    room_type = load_room_type(db, property_id, room_type_id)

    if guests > (room_type.capacity or 0):
        return Availability(
            available=False,
            remaining_rooms=0,
            message="Number of guests exceeds room type capacity",
        )

    sellable_rooms = (
        db.query(models.Room)
        .filter(
            models.Room.property_id == property_id,
            models.Room.room_type_id == room_type_id,
            models.Room.status != models.RoomHousekeepingStatus.OUT_OF_ORDER.value,
        )
        .count()
    )

    candidates = (
        db.query(models.Booking)
        .filter(
            models.Booking.property_id == property_id,
            models.Booking.room_type_id == room_type_id,
            models.Booking.check_in < check_out,
            models.Booking.check_out > check_in,
        )
        .all()
    )
    occupied = 0
    for booking in candidates:
        if models.normalize_legacy_status(booking.status) in models.ACTIVE_STATUSES and _overlaps(booking, check_in, check_out):
            occupied += 1

    remaining = max(sellable_rooms - occupied, 0)
    available = remaining > 0
    message = (
        f"Available rooms: {remaining}"
        if available
        else "No rooms available for the selected period."
    )
    logger.debug(
        "availability property_id=%s room_type_id=%s rooms=%s occupied=%s",
        property_id,
        room_type_id,
        sellable_rooms,
        occupied,
    )
    return Availability(available=available, remaining_rooms=remaining, message=message)
