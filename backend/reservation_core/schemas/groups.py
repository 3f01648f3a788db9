from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import EmptyStringModel


class BookingGroupCreate(EmptyStringModel):
    property_id: int
    name: str
    responsible_name: str
    responsible_email: Optional[str] = None
    notes: Optional[str] = None


class BookingGroupRead(BaseModel):
    id: int
    property_id: int
    name: str
    responsible_name: str
    responsible_email: Optional[str] = None
    notes: Optional[str] = None
    booking_ids: List[int] = Field(default_factory=list)
    created_at: datetime

    model_config = {"from_attributes": True}
