from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from ..crud import crud_booking
from ..database import get_db
from ..models.booking_status import normalize_legacy_status
from ..schemas import (
    ActionCheckRead,
    BookingActionsRead,
    BookingCreate,
    BookingRead,
    QuoteReproductionRead,
    RateQuoteRead,
    TransitionRead,
    TransitionRequest,
)
from ..services import booking_lifecycle

router = APIRouter(tags=["bookings"])


@router.post("/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(*, db: Session = Depends(get_db), booking_in: BookingCreate) -> Any:
    """Create a pending booking priced by the rate resolver."""
    return crud_booking.create_booking(db, booking_in)


@router.get("/bookings/{booking_id}", response_model=BookingRead)
def read_booking(*, db: Session = Depends(get_db), booking_id: int = Path(...)) -> Any:
    return crud_booking.require_booking(db, booking_id)


@router.post("/bookings/{booking_id}/transition", response_model=TransitionRead)
def transition_booking(
    *,
    db: Session = Depends(get_db),
    booking_id: int = Path(...),
    transition_in: TransitionRequest,
) -> Any:
    """Move a booking along its lifecycle.

    Guard failures come back as 409 with ``detail.reason`` set to
    ``WrongState``, ``MissingRoom`` or ``MissingPrimaryGuest``.
    """
    result = booking_lifecycle.transition(db, booking_id, transition_in.target_status)
    return TransitionRead(
        booking=BookingRead.model_validate(result.booking),
        previous_status=result.previous_status.value,
        status=result.status.value,
        balance_due=result.balance_due,
    )


@router.get("/bookings/{booking_id}/actions", response_model=BookingActionsRead)
def list_booking_actions(*, db: Session = Depends(get_db), booking_id: int = Path(...)) -> Any:
    """Every lifecycle action with whether it is currently allowed and why not."""
    booking = crud_booking.require_booking(db, booking_id)
    checks = booking_lifecycle.available_actions(db, booking.id)
    return BookingActionsRead(
        booking_id=booking.id,
        status=normalize_legacy_status(booking.status).value,
        actions=[
            ActionCheckRead(
                action=action.value,
                target_status=check.target.value,
                allowed=check.allowed,
                reason=check.reason.value if check.reason else None,
                message=check.message,
            )
            for action, check in checks.items()
        ],
    )


@router.get("/bookings/{booking_id}/quote", response_model=QuoteReproductionRead)
def reproduce_booking_quote(*, db: Session = Depends(get_db), booking_id: int = Path(...)) -> Any:
    booking = crud_booking.require_booking(db, booking_id)
    result = crud_booking.reproduce_quote(db, booking.id)
    quote = result.pop("quote")
    return QuoteReproductionRead(
        quote=RateQuoteRead(**asdict(quote)),
        quote_snapshot=booking.quote_snapshot,
        **result,
    )
