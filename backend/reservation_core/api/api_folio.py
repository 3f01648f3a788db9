from typing import Any, List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from ..crud import crud_folio
from ..database import get_db
from ..schemas import (
    ChargeCreate,
    FolioCloseRead,
    FolioItemRead,
    FolioRead,
    FolioTotalsRead,
    PaymentCreate,
    PaymentRead,
)

router = APIRouter(tags=["folio"])


@router.get("/bookings/{booking_id}/folio", response_model=FolioRead)
def read_folio(*, db: Session = Depends(get_db), booking_id: int = Path(...)) -> Any:
    """Charges, payments and totals folded from the full history."""
    history = crud_folio.get_history(db, booking_id)
    return FolioRead(
        booking_id=history.booking_id,
        items=[FolioItemRead.model_validate(i) for i in history.items],
        payments=[PaymentRead.model_validate(p) for p in history.payments],
        totals=FolioTotalsRead.model_validate(history.totals),
        closed_at=history.closed_at,
    )


@router.post(
    "/bookings/{booking_id}/folio/charges",
    response_model=FolioItemRead,
    status_code=status.HTTP_201_CREATED,
)
def add_charge(*, db: Session = Depends(get_db), booking_id: int = Path(...), charge_in: ChargeCreate) -> Any:
    return crud_folio.add_charge(db, booking_id, charge_in.description, charge_in.amount, charge_in.category)


@router.post(
    "/bookings/{booking_id}/folio/payments",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
)
def add_payment(*, db: Session = Depends(get_db), booking_id: int = Path(...), payment_in: PaymentCreate) -> Any:
    return crud_folio.add_payment(db, booking_id, payment_in.amount, payment_in.method, payment_in.reference)


@router.post(
    "/bookings/{booking_id}/folio/stay-charges",
    response_model=List[FolioItemRead],
    status_code=status.HTTP_201_CREATED,
)
def post_stay_charges(*, db: Session = Depends(get_db), booking_id: int = Path(...)) -> Any:
    return crud_folio.post_stay_charges(db, booking_id)


@router.post("/bookings/{booking_id}/folio/close", response_model=FolioCloseRead)
def close_folio(*, db: Session = Depends(get_db), booking_id: int = Path(...)) -> Any:
    """Close the folio; a checked-out booking becomes completed."""
    result = crud_folio.close_folio(db, booking_id)
    return FolioCloseRead(
        booking_id=result.booking.id,
        status=result.booking.status,
        totals=FolioTotalsRead.model_validate(result.totals),
        booking_completed=result.booking_completed,
        closed_at=result.booking.folio_closed_at,
    )
