# backend/reservation_core/models/booking.py

from sqlalchemy import Column, Integer, Date, DateTime, Numeric, ForeignKey, String, JSON
from sqlalchemy.orm import relationship

from .base import BaseModel
from .booking_status import BookingStatus

class Booking(BaseModel):
    __tablename__ = "bookings"

    id           = Column(Integer, primary_key=True, index=True)
    property_id  = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    room_type_id = Column(Integer, ForeignKey("room_types.id"), nullable=False, index=True)
    group_id     = Column(Integer, ForeignKey("booking_groups.id", ondelete="SET NULL"), nullable=True, index=True)
    guest_name   = Column(String, nullable=False)
    guest_email  = Column(String, nullable=True)
    guest_phone  = Column(String, nullable=True)
    check_in     = Column(Date, nullable=False, index=True)
    check_out    = Column(Date, nullable=False)
    total_guests = Column(Integer, nullable=False, default=1)
    # Plain string so rows written by older screens still load; the lifecycle
    # normalizes the value before evaluating any guard.
    status       = Column(String, nullable=False, default=BookingStatus.PENDING.value, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    notes        = Column(String, nullable=True)
    selected_service_ids = Column(JSON, nullable=False, default=list)
    # Nightly schedule, subtotals and contributing rule ids at quotation time
    quote_snapshot = Column(JSON, nullable=True)
    folio_closed_at = Column(DateTime, nullable=True)
    version_id   = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    # Relationships
    group        = relationship("BookingGroup", back_populates="bookings")
    rooms        = relationship("BookingRoom", back_populates="booking", order_by="BookingRoom.id")
    participants = relationship("BookingGuest", back_populates="booking", order_by="BookingGuest.id")
    folio_items  = relationship("FolioItem", back_populates="booking", order_by="FolioItem.id")
    payments     = relationship("FolioPayment", back_populates="booking", order_by="FolioPayment.id")

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def folio_closed(self) -> bool:
        return self.folio_closed_at is not None
