"""Folio ledger: append-only charges and payments for one booking."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Union
import logging

from sqlalchemy.orm import Session

from .. import models
from ..database import commit_or_conflict
from ..services import booking_lifecycle
from ..services.folio_totals import FolioTotals, compute_totals
from ..utils.errors import BalancePending, FolioAlreadyPosted, FolioClosed, InvalidAmount, InvalidRange
from .crud_booking import require_booking, touch_booking

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


@dataclass
class FolioHistory:
    booking_id: int
    items: List[models.FolioItem]
    payments: List[models.FolioPayment]
    totals: FolioTotals
    closed_at: Optional[datetime]


@dataclass
class CloseResult:
    booking: models.Booking
    totals: FolioTotals
    booking_completed: bool


def _validate_amount(amount) -> Decimal:
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount("Amount must be a number", {"amount": "invalid"})
    if not value.is_finite() or value <= 0:
        raise InvalidAmount(field_errors={"amount": "must_be_positive"})
    value = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    if value <= 0:
        raise InvalidAmount(field_errors={"amount": "must_be_positive"})
    return value


def _require_open_folio(db: Session, booking_id: int) -> models.Booking:
    booking = require_booking(db, booking_id)
    if booking.folio_closed:
        raise FolioClosed(field_errors={"booking_id": str(booking.id)})
    return booking


def list_items(db: Session, booking_id: int) -> List[models.FolioItem]:
    return (
        db.query(models.FolioItem)
        .filter(models.FolioItem.booking_id == booking_id)
        .order_by(models.FolioItem.posted_at, models.FolioItem.id)
        .all()
    )


def list_payments(db: Session, booking_id: int) -> List[models.FolioPayment]:
    return (
        db.query(models.FolioPayment)
        .filter(models.FolioPayment.booking_id == booking_id)
        .order_by(models.FolioPayment.paid_at, models.FolioPayment.id)
        .all()
    )


def add_charge(
    db: Session,
    booking_id: int,
    description: str,
    amount,
    category: Union[str, models.FolioCategory] = models.FolioCategory.SERVICE,
) -> models.FolioItem:
    value = _validate_amount(amount)
    try:
        category = models.FolioCategory(category)
    except ValueError:
        raise InvalidRange("Unknown folio category", {"category": "invalid"})
    if not (description or "").strip():
        raise InvalidRange("Charge description is required", {"description": "required"})
    booking = _require_open_folio(db, booking_id)
    item = models.FolioItem(
        booking_id=booking.id,
        description=description.strip(),
        amount=value,
        category=category.value,
        posted_at=datetime.utcnow(),
    )
    db.add(item)
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(item)
    logger.info("folio.charge booking_id=%s amount=%s category=%s", booking.id, value, category.value)
    return item


def add_payment(
    db: Session,
    booking_id: int,
    amount,
    method: Union[str, models.PaymentMethod],
    reference: Optional[str] = None,
) -> models.FolioPayment:
    value = _validate_amount(amount)
    try:
        method = models.PaymentMethod(method)
    except ValueError:
        raise InvalidRange("Unknown payment method", {"method": "invalid"})
    booking = _require_open_folio(db, booking_id)
    payment = models.FolioPayment(
        booking_id=booking.id,
        amount=value,
        method=method.value,
        reference=reference,
        paid_at=datetime.utcnow(),
    )
    db.add(payment)
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(payment)
    logger.info("folio.payment booking_id=%s amount=%s method=%s", booking.id, value, method.value)
    return payment


def get_totals(db: Session, booking_id: int) -> FolioTotals:
    require_booking(db, booking_id)
    return compute_totals(list_items(db, booking_id), list_payments(db, booking_id))


def get_history(db: Session, booking_id: int) -> FolioHistory:
    booking = require_booking(db, booking_id)
    items = list_items(db, booking.id)
    payments = list_payments(db, booking.id)
    return FolioHistory(
        booking_id=booking.id,
        items=items,
        payments=payments,
        totals=compute_totals(items, payments),
        closed_at=booking.folio_closed_at,
    )


def close_folio(db: Session, booking_id: int) -> CloseResult:
    """Close the folio once nothing is owed.

    The balance check and the close are one unit of work on the booking
    row; a charge committed concurrently makes this commit fail with a
    version conflict instead of closing over a stale balance.
    """
    booking = _require_open_folio(db, booking_id)
    totals = compute_totals(list_items(db, booking.id), list_payments(db, booking.id))
    if totals.balance > 0:
        raise BalancePending(totals.balance)
    booking.folio_closed_at = datetime.utcnow()
    completed = booking_lifecycle.complete_on_folio_close(db, booking)
    touch_booking(booking)
    commit_or_conflict(db)
    db.refresh(booking)
    logger.info(
        "folio.closed booking_id=%s balance=%s completed=%s",
        booking.id,
        totals.balance,
        completed,
    )
    return CloseResult(booking=booking, totals=totals, booking_completed=completed)


def post_stay_charges(db: Session, booking_id: int) -> List[models.FolioItem]:
    """Post the quoted nightly rates and add-on services as folio charges.

    Uses the booking's quote snapshot so the folio matches the accepted
    price, not whatever the rules say today. Posting twice is refused.
    """
    booking = _require_open_folio(db, booking_id)
    already = (
        db.query(models.FolioItem)
        .filter(
            models.FolioItem.booking_id == booking.id,
            models.FolioItem.category == models.FolioCategory.RATE.value,
        )
        .count()
    )
    if already:
        raise FolioAlreadyPosted(field_errors={"booking_id": str(booking.id)})

    snapshot = booking.quote_snapshot or {}
    now = datetime.utcnow()
    posted: List[models.FolioItem] = []
    for night in snapshot.get("nightly", []):
        night_date = date.fromisoformat(night["night"])
        posted.append(
            models.FolioItem(
                booking_id=booking.id,
                description=f"Room rate {night_date.isoformat()}",
                amount=Decimal(str(night["amount"])),
                category=models.FolioCategory.RATE.value,
                posted_at=now,
            )
        )
    services_subtotal = Decimal(str(snapshot.get("services_subtotal") or "0"))
    if services_subtotal > 0:
        posted.append(
            models.FolioItem(
                booking_id=booking.id,
                description="Add-on services",
                amount=services_subtotal,
                category=models.FolioCategory.SERVICE.value,
                posted_at=now,
            )
        )
    if not posted:
        return []
    db.add_all(posted)
    touch_booking(booking)
    commit_or_conflict(db)
    for item in posted:
        db.refresh(item)
    logger.info("folio.stay_posted booking_id=%s items=%s", booking.id, len(posted))
    return posted
