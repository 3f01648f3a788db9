from sqlalchemy import Boolean, Column, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class BookingRoom(BaseModel):
    """Link between a booking and a physical room."""

    __tablename__ = "booking_rooms"
    __table_args__ = (UniqueConstraint("booking_id", "room_id", name="uq_booking_room"),)

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    is_primary = Column(Boolean, nullable=False, default=False)

    booking = relationship("Booking", back_populates="rooms")
    room = relationship("Room")
