from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .base import EmptyStringModel
from .rates import RateQuoteRead


class BookingCreate(EmptyStringModel):
    property_id: int
    room_type_id: int
    check_in: date
    check_out: date
    total_guests: int = 1
    guest_name: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    notes: Optional[str] = None
    selected_service_ids: List[int] = Field(default_factory=list)


class BookingRead(BaseModel):
    id: int
    property_id: int
    room_type_id: int
    group_id: Optional[int] = None
    guest_name: str
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    check_in: date
    check_out: date
    nights: int
    total_guests: int
    status: str
    total_amount: Decimal
    notes: Optional[str] = None
    selected_service_ids: Optional[List[int]] = None
    folio_closed_at: Optional[datetime] = None
    version_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TransitionRequest(EmptyStringModel):
    target_status: str


class TransitionRead(BaseModel):
    booking: BookingRead
    previous_status: str
    status: str
    balance_due: Decimal


class ActionCheckRead(BaseModel):
    action: str
    target_status: str
    allowed: bool
    reason: Optional[str] = None
    message: Optional[str] = None


class BookingActionsRead(BaseModel):
    booking_id: int
    status: str
    actions: List[ActionCheckRead]


class QuoteReproductionRead(BaseModel):
    booking_id: int
    quoted_total: Decimal
    current_total: Decimal
    matches: bool
    quote: RateQuoteRead
    quote_snapshot: Optional[Dict] = None
