from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import commit_or_conflict
from ..utils.errors import NotFound, PrimaryGuestRequired
from .crud_booking import require_open_booking, touch_booking

logger = logging.getLogger(__name__)


def list_participants(db: Session, booking_id: int) -> List[models.BookingGuest]:
    return (
        db.query(models.BookingGuest)
        .filter(models.BookingGuest.booking_id == booking_id)
        .order_by(models.BookingGuest.is_primary.desc(), models.BookingGuest.id)
        .all()
    )


def primary_guest(db: Session, booking_id: int) -> Optional[models.BookingGuest]:
    return (
        db.query(models.BookingGuest)
        .filter(
            models.BookingGuest.booking_id == booking_id,
            models.BookingGuest.is_primary.is_(True),
        )
        .first()
    )


def _demote_all(db: Session, booking_id: int) -> None:
    for guest in db.query(models.BookingGuest).filter(models.BookingGuest.booking_id == booking_id):
        guest.is_primary = False


def add_participant(db: Session, booking_id: int, participant_in: schemas.ParticipantCreate) -> models.BookingGuest:
    """Attach a guest to a booking; the first one becomes the primary guest."""
    booking = require_open_booking(db, booking_id, "add a participant")
    current_primary = primary_guest(db, booking.id)
    make_primary = current_primary is None or bool(participant_in.is_primary)
    if make_primary and current_primary is not None:
        _demote_all(db, booking.id)
    guest = models.BookingGuest(
        booking_id=booking.id,
        full_name=participant_in.full_name,
        email=participant_in.email,
        document=participant_in.document,
        is_primary=make_primary,
    )
    db.add(guest)
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(guest)
    return guest


def _require_participant(db: Session, participant_id: int) -> models.BookingGuest:
    guest = db.query(models.BookingGuest).filter(models.BookingGuest.id == participant_id).first()
    if guest is None:
        raise NotFound("participant", participant_id)
    return guest


def set_primary_participant(db: Session, participant_id: int) -> models.BookingGuest:
    guest = _require_participant(db, participant_id)
    booking = require_open_booking(db, guest.booking_id, "change the primary guest")
    if guest.is_primary:
        return guest
    _demote_all(db, booking.id)
    guest.is_primary = True
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(guest)
    return guest


def remove_participant(db: Session, participant_id: int) -> None:
    """Detach a guest.

    The primary guest cannot be removed: another participant has to be
    promoted first, and a sole primary participant always stays.
    """
    guest = _require_participant(db, participant_id)
    booking = require_open_booking(db, guest.booking_id, "remove a participant")
    if guest.is_primary:
        others = (
            db.query(models.BookingGuest)
            .filter(
                models.BookingGuest.booking_id == booking.id,
                models.BookingGuest.id != guest.id,
            )
            .count()
        )
        message = (
            "Promote another participant to primary before removing this one"
            if others
            else "The only participant of a booking cannot be removed"
        )
        raise PrimaryGuestRequired(message, {"participant_id": str(guest.id)})
    db.delete(guest)
    touch_booking(booking)
    commit_or_conflict(db)
    logger.info("participant.removed booking_id=%s participant_id=%s", booking.id, participant_id)
