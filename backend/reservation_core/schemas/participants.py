from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .base import EmptyStringModel


class ParticipantCreate(EmptyStringModel):
    full_name: str
    email: Optional[str] = None
    document: Optional[str] = None
    is_primary: bool = False


class ParticipantRead(BaseModel):
    id: int
    booking_id: int
    full_name: str
    email: Optional[str] = None
    document: Optional[str] = None
    is_primary: bool
    created_at: datetime

    model_config = {"from_attributes": True}
