"""Rooms linked to a booking and the single primary room among them."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from .. import models
from ..core.config import settings
from ..database import commit_or_conflict
from ..utils.errors import NotFound, RoomConflict
from .crud_booking import require_open_booking, touch_booking

logger = logging.getLogger(__name__)


@dataclass
class AssignmentResult:
    link: models.BookingRoom
    created: bool
    conflicting_booking_ids: List[int] = field(default_factory=list)


@dataclass
class UnassignResult:
    booking_id: int
    room_id: int
    primary_removed: bool


def list_rooms(db: Session, booking_id: int) -> List[models.BookingRoom]:
    return (
        db.query(models.BookingRoom)
        .filter(models.BookingRoom.booking_id == booking_id)
        .order_by(models.BookingRoom.id)
        .all()
    )


def primary_room(db: Session, booking_id: int) -> Optional[models.BookingRoom]:
    return (
        db.query(models.BookingRoom)
        .filter(
            models.BookingRoom.booking_id == booking_id,
            models.BookingRoom.is_primary.is_(True),
        )
        .first()
    )


def touch_room(room: models.Room) -> None:
    room.updated_at = datetime.utcnow()
    flag_modified(room, "updated_at")


def find_conflicts(db: Session, booking: models.Booking, room_id: int) -> List[models.Booking]:
    """Other active bookings holding ``room_id`` over an intersecting stay."""
    rows = (
        db.query(models.Booking)
        .join(models.BookingRoom, models.BookingRoom.booking_id == models.Booking.id)
        .filter(
            models.BookingRoom.room_id == room_id,
            models.Booking.id != booking.id,
            models.Booking.check_in < booking.check_out,
            models.Booking.check_out > booking.check_in,
        )
        .order_by(models.Booking.id)
        .all()
    )
    return [b for b in rows if models.normalize_legacy_status(b.status) in models.ACTIVE_STATUSES]


def assign_room(db: Session, booking_id: int, room_id: int) -> AssignmentResult:
    """Link a room to a booking.

    The first link of a booking becomes primary. Linking a room that is
    already linked returns the existing link unchanged.

    The room row is locked (``FOR UPDATE`` where the backend supports it)
    and its version is bumped in the same commit as the link, so an
    assignment of the same room committed after the conflict check fails
    with ``ConcurrencyConflict``.
    """
    booking = require_open_booking(db, booking_id, "assign a room")
    room = (
        db.query(models.Room)
        .filter(models.Room.id == room_id, models.Room.property_id == booking.property_id)
        .with_for_update()
        .first()
    )
    if room is None:
        raise NotFound("room", room_id)

    existing = (
        db.query(models.BookingRoom)
        .filter(models.BookingRoom.booking_id == booking.id, models.BookingRoom.room_id == room.id)
        .first()
    )
    if existing is not None:
        return AssignmentResult(link=existing, created=False)

    conflicts = find_conflicts(db, booking, room.id)
    conflict_ids = [b.id for b in conflicts]
    if conflict_ids:
        if settings.ROOM_CONFLICT_POLICY == "reject":
            raise RoomConflict(room.id, conflict_ids)
        logger.warning(
            "room.assign conflict booking_id=%s room_id=%s conflicting=%s",
            booking.id,
            room.id,
            conflict_ids,
        )

    has_primary = primary_room(db, booking.id) is not None
    link = models.BookingRoom(booking_id=booking.id, room_id=room.id, is_primary=not has_primary)
    db.add(link)
    touch_booking(booking)
    touch_room(room)
    commit_or_conflict(db)
    db.refresh(link)
    logger.info(
        "room.assigned booking_id=%s room_id=%s primary=%s",
        booking.id,
        room.id,
        link.is_primary,
    )
    return AssignmentResult(link=link, created=True, conflicting_booking_ids=conflict_ids)


def _require_link(db: Session, link_id: int) -> models.BookingRoom:
    link = db.query(models.BookingRoom).filter(models.BookingRoom.id == link_id).first()
    if link is None:
        raise NotFound("booking_room", link_id, "Room assignment not found")
    return link


def set_primary_room(db: Session, link_id: int) -> models.BookingRoom:
    link = _require_link(db, link_id)
    booking = require_open_booking(db, link.booking_id, "change the primary room")
    if link.is_primary:
        return link
    for other in list_rooms(db, booking.id):
        other.is_primary = other.id == link.id
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(link)
    return link


def unassign_room(db: Session, link_id: int) -> UnassignResult:
    """Remove a room link.

    Removing the primary link leaves the booking without a primary room;
    check-in stays blocked until a room is assigned or promoted again.
    """
    link = _require_link(db, link_id)
    booking = require_open_booking(db, link.booking_id, "unassign a room")
    result = UnassignResult(booking_id=booking.id, room_id=link.room_id, primary_removed=bool(link.is_primary))
    db.delete(link)
    touch_booking(booking)
    commit_or_conflict(db)
    if result.primary_removed:
        logger.warning("room.unassigned primary booking_id=%s room_id=%s", booking.id, result.room_id)
    return result
