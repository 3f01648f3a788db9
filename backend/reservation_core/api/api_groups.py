from typing import Any

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from .. import models
from ..crud import crud_booking
from ..database import get_db
from ..schemas import BookingGroupCreate, BookingGroupRead, BookingRead

router = APIRouter(tags=["booking-groups"])


def _group_read(group: models.BookingGroup) -> BookingGroupRead:
    return BookingGroupRead(
        id=group.id,
        property_id=group.property_id,
        name=group.name,
        responsible_name=group.responsible_name,
        responsible_email=group.responsible_email,
        notes=group.notes,
        booking_ids=[b.id for b in group.bookings],
        created_at=group.created_at,
    )


@router.post("/booking-groups", response_model=BookingGroupRead, status_code=status.HTTP_201_CREATED)
def create_group(*, db: Session = Depends(get_db), group_in: BookingGroupCreate) -> Any:
    return _group_read(crud_booking.create_group(db, group_in))


@router.post("/booking-groups/{group_id}/bookings/{booking_id}", response_model=BookingRead)
def attach_booking(
    *,
    db: Session = Depends(get_db),
    group_id: int = Path(...),
    booking_id: int = Path(...),
) -> Any:
    """Attach a booking to a group; a booking belongs to at most one group."""
    return crud_booking.attach_to_group(db, booking_id, group_id)
