from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import EmptyStringModel


class RateRequest(EmptyStringModel):
    property_id: int
    room_type_id: int
    check_in: date
    check_out: date
    guests: int = 1
    service_ids: List[int] = Field(default_factory=list)


class NightlyRateRead(BaseModel):
    night: date
    amount: Decimal
    rule_id: Optional[int] = None

    model_config = {"from_attributes": True}


class RateQuoteRead(BaseModel):
    property_id: Optional[int] = None
    room_type_id: int
    check_in: date
    check_out: date
    guests: int
    nights: int
    nightly: List[NightlyRateRead]
    rooms_subtotal: Decimal
    services_subtotal: Decimal
    total: Decimal
    average_nightly: Decimal
    rule_ids: List[int] = Field(default_factory=list)
    service_ids: List[int] = Field(default_factory=list)
    currency: str

    model_config = {"from_attributes": True}


class AvailabilityRequest(EmptyStringModel):
    property_id: int
    room_type_id: int
    check_in: date
    check_out: date
    guests: int = 1


class AvailabilityRead(BaseModel):
    available: bool
    remaining_rooms: int
    message: str

    model_config = {"from_attributes": True}
