from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class BookingGuest(BaseModel):
    """A participant staying under a booking."""

    __tablename__ = "booking_guests"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    document = Column(String, nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)

    booking = relationship("Booking", back_populates="participants")
