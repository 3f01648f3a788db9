from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Iterable

from sqlalchemy.orm import Session

from .. import models

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class FolioTotals:
    total_charges: Decimal
    total_paid: Decimal
    balance: Decimal

    @property
    def settled(self) -> bool:
        return self.balance <= Decimal("0")


def _amount(entry: Any) -> Decimal:
    raw = entry.get("amount") if isinstance(entry, dict) else getattr(entry, "amount", None)
    if raw is None:
        return Decimal("0")
    try:
        return raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def compute_totals(items: Iterable[Any], payments: Iterable[Any]) -> FolioTotals:
    """Fold the full charge and payment history into folio totals.

    Nothing is cached: the balance is always ``sum(charges) - sum(payments)``
    over whatever history is passed in.
    """
    total_charges = sum((_amount(i) for i in items), Decimal("0")).quantize(_CENT, rounding=ROUND_HALF_UP)
    total_paid = sum((_amount(p) for p in payments), Decimal("0")).quantize(_CENT, rounding=ROUND_HALF_UP)
    return FolioTotals(
        total_charges=total_charges,
        total_paid=total_paid,
        balance=(total_charges - total_paid).quantize(_CENT, rounding=ROUND_HALF_UP),
    )


def folio_totals_for(db: Session, booking_id: int) -> FolioTotals:
    items = db.query(models.FolioItem).filter(models.FolioItem.booking_id == booking_id).all()
    payments = db.query(models.FolioPayment).filter(models.FolioPayment.booking_id == booking_id).all()
    return compute_totals(items, payments)

