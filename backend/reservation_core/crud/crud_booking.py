from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from .. import models, schemas
from ..database import commit_or_conflict
from ..services.rate_resolver import resolve_rate
from ..utils.errors import AlreadyGrouped, GuardError, GuardReason, NotFound

logger = logging.getLogger(__name__)


def get_booking(db: Session, booking_id: int) -> Optional[models.Booking]:
    return db.query(models.Booking).filter(models.Booking.id == booking_id).first()


def require_booking(db: Session, booking_id: int) -> models.Booking:
    booking = get_booking(db, booking_id)
    if booking is None:
        raise NotFound("booking", booking_id)
    return booking


def require_open_booking(db: Session, booking_id: int, action: str) -> models.Booking:
    """Load a booking that can still have rooms or guests changed."""
    booking = require_booking(db, booking_id)
    current = models.normalize_legacy_status(booking.status)
    if current in models.TERMINAL_STATUSES:
        raise GuardError(
            GuardReason.WRONG_STATE,
            f"Cannot {action} on a booking that is {current.value}",
            current_status=current,
        )
    return booking


def touch_booking(booking: models.Booking) -> None:
    """Mark the booking row dirty so the flush bumps its version.

    Child rows (rooms, guests, folio entries) do not update the booking row on
    their own; touching it makes concurrent writers on the same aggregate
    collide on ``version_id``.
    """
    booking.updated_at = datetime.utcnow()
    flag_modified(booking, "updated_at")


def create_booking(db: Session, booking_in: schemas.BookingCreate) -> models.Booking:
    """Create a ``pending`` booking from an accepted quote request.

    The rate is resolved again server side; the stored total and snapshot are
    what the guest accepted.
    """
    quote = resolve_rate(
        db,
        property_id=booking_in.property_id,
        room_type_id=booking_in.room_type_id,
        check_in=booking_in.check_in,
        check_out=booking_in.check_out,
        guests=booking_in.total_guests,
        service_ids=booking_in.selected_service_ids,
    )
    db_booking = models.Booking(
        property_id=booking_in.property_id,
        room_type_id=booking_in.room_type_id,
        guest_name=booking_in.guest_name,
        guest_email=booking_in.guest_email,
        guest_phone=booking_in.guest_phone,
        check_in=booking_in.check_in,
        check_out=booking_in.check_out,
        total_guests=booking_in.total_guests,
        notes=booking_in.notes,
        selected_service_ids=list(quote.service_ids),
        status=models.BookingStatus.PENDING.value,
        total_amount=quote.total,
        quote_snapshot=quote.snapshot(resolved_at=datetime.utcnow()),
    )
    db.add(db_booking)
    db.commit()
    db.refresh(db_booking)
    logger.info("booking.created id=%s total=%s", db_booking.id, db_booking.total_amount)
    return db_booking


def reproduce_quote(db: Session, booking_id: int) -> dict:
    """Re-run rate resolution with the booking's stored inputs.

    Returns the fresh quote together with whether its total still equals the
    quoted total. A mismatch means the rule set changed since quotation.
    """
    booking = require_booking(db, booking_id)
    quote = resolve_rate(
        db,
        property_id=booking.property_id,
        room_type_id=booking.room_type_id,
        check_in=booking.check_in,
        check_out=booking.check_out,
        guests=booking.total_guests,
        service_ids=booking.selected_service_ids or [],
    )
    quoted_total = Decimal(str((booking.quote_snapshot or {}).get("total", booking.total_amount)))
    return {
        "booking_id": booking.id,
        "quoted_total": quoted_total,
        "current_total": quote.total,
        "matches": quote.total == quoted_total,
        "quote": quote,
    }


def create_group(db: Session, group_in: schemas.BookingGroupCreate) -> models.BookingGroup:
    if db.query(models.Property).filter(models.Property.id == group_in.property_id).first() is None:
        raise NotFound("property", group_in.property_id)
    group = models.BookingGroup(**group_in.model_dump())
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def attach_to_group(db: Session, booking_id: int, group_id: int) -> models.Booking:
    """Put a booking under a group; a booking belongs to at most one group."""
    booking = require_booking(db, booking_id)
    group = db.query(models.BookingGroup).filter(models.BookingGroup.id == group_id).first()
    if group is None:
        raise NotFound("group", group_id)
    if group.property_id != booking.property_id:
        raise NotFound("group", group_id, "Group not found for this property")
    if booking.group_id == group.id:
        return booking
    if booking.group_id is not None:
        raise AlreadyGrouped(field_errors={"group_id": str(booking.group_id)})
    booking.group_id = group.id
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(booking)
    return booking


def detach_from_group(db: Session, booking_id: int) -> models.Booking:
    booking = require_booking(db, booking_id)
    if booking.group_id is None:
        return booking
    booking.group_id = None
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(booking)
    return booking
