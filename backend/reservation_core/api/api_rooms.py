from typing import Any, List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from ..crud import crud_booking, crud_room_assignment
from ..database import get_db
from ..schemas import AssignmentRead, BookingRoomRead, RoomAssignRequest, UnassignRead

router = APIRouter(tags=["booking-rooms"])


@router.get("/bookings/{booking_id}/rooms", response_model=List[BookingRoomRead])
def list_booking_rooms(*, db: Session = Depends(get_db), booking_id: int = Path(...)) -> Any:
    booking = crud_booking.require_booking(db, booking_id)
    return crud_room_assignment.list_rooms(db, booking.id)


@router.post("/bookings/{booking_id}/rooms", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
def assign_room(
    *,
    db: Session = Depends(get_db),
    booking_id: int = Path(...),
    assign_in: RoomAssignRequest,
) -> Any:
    """Link a room; the first room linked to a booking becomes primary."""
    result = crud_room_assignment.assign_room(db, booking_id, assign_in.room_id)
    return AssignmentRead(
        link=BookingRoomRead.model_validate(result.link),
        created=result.created,
        conflicting_booking_ids=result.conflicting_booking_ids,
    )


@router.post("/booking-rooms/{link_id}/primary", response_model=BookingRoomRead)
def set_primary_room(*, db: Session = Depends(get_db), link_id: int = Path(...)) -> Any:
    return crud_room_assignment.set_primary_room(db, link_id)


@router.delete("/booking-rooms/{link_id}", response_model=UnassignRead)
def unassign_room(*, db: Session = Depends(get_db), link_id: int = Path(...)) -> Any:
    result = crud_room_assignment.unassign_room(db, link_id)
    return UnassignRead(
        booking_id=result.booking_id,
        room_id=result.room_id,
        primary_removed=result.primary_removed,
    )
