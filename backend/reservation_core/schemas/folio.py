from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from ..models.folio import FolioCategory, PaymentMethod
from .base import EmptyStringModel


class ChargeCreate(EmptyStringModel):
    description: str
    amount: Decimal
    category: FolioCategory = FolioCategory.SERVICE


class PaymentCreate(EmptyStringModel):
    amount: Decimal
    method: PaymentMethod
    reference: Optional[str] = None


class FolioItemRead(BaseModel):
    id: int
    booking_id: int
    description: str
    amount: Decimal
    category: str
    posted_at: datetime

    model_config = {"from_attributes": True}


class PaymentRead(BaseModel):
    id: int
    booking_id: int
    amount: Decimal
    method: str
    reference: Optional[str] = None
    paid_at: datetime

    model_config = {"from_attributes": True}


class FolioTotalsRead(BaseModel):
    total_charges: Decimal
    total_paid: Decimal
    balance: Decimal

    model_config = {"from_attributes": True}


class FolioRead(BaseModel):
    booking_id: int
    items: List[FolioItemRead]
    payments: List[PaymentRead]
    totals: FolioTotalsRead
    closed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FolioCloseRead(BaseModel):
    booking_id: int
    status: str
    totals: FolioTotalsRead
    booking_completed: bool
    closed_at: datetime
