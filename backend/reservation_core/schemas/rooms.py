from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from .base import EmptyStringModel


class RoomAssignRequest(EmptyStringModel):
    room_id: int


class BookingRoomRead(BaseModel):
    id: int
    booking_id: int
    room_id: int
    is_primary: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AssignmentRead(BaseModel):
    link: BookingRoomRead
    created: bool
    conflicting_booking_ids: List[int] = Field(default_factory=list)


class UnassignRead(BaseModel):
    booking_id: int
    room_id: int
    primary_removed: bool
