import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, event
from sqlalchemy.orm import relationship

from .base import BaseModel
from ..utils.errors import FolioEntryImmutable


class FolioCategory(str, enum.Enum):
    RATE = "rate"
    SERVICE = "service"
    ADJUSTMENT = "adjustment"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    PIX = "pix"
    STRIPE = "stripe"


class FolioItem(BaseModel):
    """A charge on the booking's folio. Rows are never updated or deleted."""

    __tablename__ = "folio_items"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False, default=FolioCategory.SERVICE.value)
    posted_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    booking = relationship("Booking", back_populates="folio_items")


class FolioPayment(BaseModel):
    """A payment against the booking's folio. Rows are never updated or deleted."""

    __tablename__ = "folio_payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String, nullable=False)
    reference = Column(String, nullable=True)
    paid_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    booking = relationship("Booking", back_populates="payments")


def _reject_mutation(mapper, connection, target):  # noqa: ANN001
    raise FolioEntryImmutable(field_errors={mapper.local_table.name: "append_only"})


for _model in (FolioItem, FolioPayment):
    event.listen(_model, "before_update", _reject_mutation)
    event.listen(_model, "before_delete", _reject_mutation)
