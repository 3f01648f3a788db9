"""Catalog tables owned by the property-management collaborators.

The reservation core reads these rows: base nightly prices and capacity of
room types, which rooms exist, and add-on service prices. The only write is
the room row's version counter, bumped when a booking takes the room.
"""

import enum

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class RoomHousekeepingStatus(str, enum.Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    INSPECTED = "inspected"
    OUT_OF_ORDER = "out_of_order"


class Property(BaseModel):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    currency = Column(String, nullable=True)

    room_types = relationship("RoomType", back_populates="property")
    rooms = relationship("Room", back_populates="property")


class RoomType(BaseModel):
    __tablename__ = "room_types"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    base_price = Column(Numeric(12, 2), nullable=False)
    capacity = Column(Integer, nullable=False, default=2)

    property = relationship("Property", back_populates="room_types")
    rooms = relationship("Room", back_populates="room_type")


class Room(BaseModel):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    room_type_id = Column(Integer, ForeignKey("room_types.id"), nullable=False, index=True)
    room_number = Column(String, nullable=False)
    status = Column(String, nullable=False, default=RoomHousekeepingStatus.CLEAN.value)
    # Bumped by every room assignment so two overlapping assigns serialize.
    version_id = Column(Integer, nullable=False)

    property = relationship("Property", back_populates="rooms")
    room_type = relationship("RoomType", back_populates="rooms")

    __mapper_args__ = {"version_id_col": version_id}


class ServiceOffering(BaseModel):
    __tablename__ = "service_offerings"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    is_per_person = Column(Boolean, nullable=False, default=False)
    is_per_day = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default="active")
