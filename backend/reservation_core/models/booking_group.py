from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class BookingGroup(BaseModel):
    __tablename__ = "booking_groups"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    responsible_name = Column(String, nullable=False)
    responsible_email = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    bookings = relationship("Booking", back_populates="group")
