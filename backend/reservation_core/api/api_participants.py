from typing import Any, List

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from ..crud import crud_booking, crud_participant
from ..database import get_db
from ..schemas import ParticipantCreate, ParticipantRead

router = APIRouter(tags=["participants"])


@router.get("/bookings/{booking_id}/participants", response_model=List[ParticipantRead])
def list_participants(*, db: Session = Depends(get_db), booking_id: int = Path(...)) -> Any:
    booking = crud_booking.require_booking(db, booking_id)
    return crud_participant.list_participants(db, booking.id)


@router.post(
    "/bookings/{booking_id}/participants",
    response_model=ParticipantRead,
    status_code=status.HTTP_201_CREATED,
)
def add_participant(
    *,
    db: Session = Depends(get_db),
    booking_id: int = Path(...),
    participant_in: ParticipantCreate,
) -> Any:
    return crud_participant.add_participant(db, booking_id, participant_in)


@router.post("/participants/{participant_id}/primary", response_model=ParticipantRead)
def set_primary_participant(*, db: Session = Depends(get_db), participant_id: int = Path(...)) -> Any:
    return crud_participant.set_primary_participant(db, participant_id)


@router.delete("/participants/{participant_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_participant(*, db: Session = Depends(get_db), participant_id: int = Path(...)) -> Response:
    crud_participant.remove_participant(db, participant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
