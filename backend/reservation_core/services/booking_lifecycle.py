"""Booking status state machine.

::

    pending -> confirmed -> checked_in -> checked_out -> completed
       |           |
       +-----------+--> cancelled | no_show

``checked_out``, ``cancelled``, ``no_show`` and ``completed`` accept no
further transitions. ``completed`` is never requested directly; it is the
result of closing the folio of a checked-out booking.

Every guard failure is a ``GuardError`` whose ``reason`` tells the caller
what to fix: the booking is in the wrong state, it has no primary room, or
it has no primary guest.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.orm import Session

from .. import models
from ..crud import crud_participant, crud_room_assignment
from ..crud.crud_booking import require_booking, touch_booking
from ..database import commit_or_conflict
from ..models.booking_status import PRE_ARRIVAL_STATUSES, BookingStatus, normalize_legacy_status
from ..utils.errors import GuardError, GuardReason, InvalidStatus
from .folio_totals import folio_totals_for

logger = logging.getLogger(__name__)


class BookingAction(str, enum.Enum):
    CONFIRM = "confirm"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    CANCEL = "cancel"
    NO_SHOW = "no_show"


ACTION_TARGETS = {
    BookingAction.CONFIRM: BookingStatus.CONFIRMED,
    BookingAction.CHECK_IN: BookingStatus.CHECKED_IN,
    BookingAction.CHECK_OUT: BookingStatus.CHECKED_OUT,
    BookingAction.CANCEL: BookingStatus.CANCELLED,
    BookingAction.NO_SHOW: BookingStatus.NO_SHOW,
}

# target status -> statuses it may be reached from
ALLOWED_FROM = {
    BookingStatus.CONFIRMED: frozenset({BookingStatus.PENDING}),
    BookingStatus.CHECKED_IN: PRE_ARRIVAL_STATUSES,
    BookingStatus.CHECKED_OUT: frozenset({BookingStatus.CHECKED_IN}),
    BookingStatus.CANCELLED: PRE_ARRIVAL_STATUSES,
    BookingStatus.NO_SHOW: PRE_ARRIVAL_STATUSES,
}


@dataclass
class TransitionCheck:
    target: BookingStatus
    allowed: bool
    reason: Optional[GuardReason] = None
    message: Optional[str] = None

    def raise_if_blocked(self, current: BookingStatus) -> None:
        if not self.allowed:
            raise GuardError(self.reason, self.message, current_status=current, target_status=self.target)


@dataclass
class TransitionResult:
    booking: models.Booking
    previous_status: BookingStatus
    status: BookingStatus
    balance_due: Decimal = Decimal("0.00")


def parse_target(target: Union[str, BookingStatus]) -> BookingStatus:
    if isinstance(target, BookingStatus):
        return target
    key = (target or "").strip().lower()
    try:
        return BookingStatus(key)
    except ValueError:
        raise InvalidStatus(f"Unknown target status '{target}'", {"target_status": "invalid"})


def evaluate(db: Session, booking: models.Booking, target: Union[str, BookingStatus]) -> TransitionCheck:
    """Check whether ``booking`` may move to ``target`` without changing it."""
    target = parse_target(target)
    current = normalize_legacy_status(booking.status)
    sources = ALLOWED_FROM.get(target, frozenset())
    if current not in sources:
        if current == target:
            message = f"Booking is already {current.value}"
        else:
            message = f"Cannot move a {current.value} booking to {target.value}"
        return TransitionCheck(target, False, GuardReason.WRONG_STATE, message)

    if target == BookingStatus.CHECKED_IN:
        if crud_room_assignment.primary_room(db, booking.id) is None:
            return TransitionCheck(
                target,
                False,
                GuardReason.MISSING_ROOM,
                "Assign a room to the booking before checking in",
            )
        if crud_participant.primary_guest(db, booking.id) is None:
            return TransitionCheck(
                target,
                False,
                GuardReason.MISSING_PRIMARY_GUEST,
                "Add a primary guest to the booking before checking in",
            )
    return TransitionCheck(target, True)


def available_actions(db: Session, booking_id: int) -> dict[BookingAction, TransitionCheck]:
    booking = require_booking(db, booking_id)
    return {action: evaluate(db, booking, target) for action, target in ACTION_TARGETS.items()}


def transition(db: Session, booking_id: int, target: Union[str, BookingStatus]) -> TransitionResult:
    """Move a booking to ``target`` if every guard passes.

    The status write goes through the booking's version counter, so of two
    concurrent callers working from the same state only one commits.
    """
    target = parse_target(target)
    booking = require_booking(db, booking_id)
    current = normalize_legacy_status(booking.status)
    check = evaluate(db, booking, target)
    if not check.allowed:
        logger.info(
            "booking.transition blocked id=%s from=%s to=%s reason=%s",
            booking.id,
            current.value,
            target.value,
            check.reason.value,
        )
    check.raise_if_blocked(current)

    booking.status = target.value
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(booking)

    balance_due = Decimal("0.00")
    if target == BookingStatus.CHECKED_OUT:
        totals = folio_totals_for(db, booking.id)
        balance_due = max(totals.balance, Decimal("0.00"))
        if balance_due > 0:
            logger.warning("booking.checked_out with open balance id=%s balance=%s", booking.id, balance_due)
    return TransitionResult(booking=booking, previous_status=current, status=target, balance_due=balance_due)


def confirm(db: Session, booking_id: int) -> TransitionResult:
    return transition(db, booking_id, BookingStatus.CONFIRMED)


def check_in(db: Session, booking_id: int) -> TransitionResult:
    return transition(db, booking_id, BookingStatus.CHECKED_IN)


def check_out(db: Session, booking_id: int) -> TransitionResult:
    return transition(db, booking_id, BookingStatus.CHECKED_OUT)


def cancel(db: Session, booking_id: int) -> TransitionResult:
    return transition(db, booking_id, BookingStatus.CANCELLED)


def mark_no_show(db: Session, booking_id: int) -> TransitionResult:
    return transition(db, booking_id, BookingStatus.NO_SHOW)


def complete_on_folio_close(db: Session, booking: models.Booking) -> bool:
    """Apply the folio-closed signal inside the caller's unit of work.

    A checked-out booking becomes ``completed`` and the pricing rules it was
    quoted against are locked. Bookings in any other state keep their
    status. Returns whether the booking was completed.
    """
    if normalize_legacy_status(booking.status) != BookingStatus.CHECKED_OUT:
        return False
    booking.status = BookingStatus.COMPLETED.value
    rule_ids = [rid for rid in (booking.quote_snapshot or {}).get("rule_ids", []) if rid is not None]
    if rule_ids:
        for rule in db.query(models.PricingRule).filter(models.PricingRule.id.in_(rule_ids)):
            rule.locked = True
    return True
