from .catalog import Property, RoomType, Room, RoomHousekeepingStatus, ServiceOffering
from .booking_status import (
    BookingStatus,
    ACTIVE_STATUSES,
    PRE_ARRIVAL_STATUSES,
    TERMINAL_STATUSES,
    normalize_legacy_status,
)
from .booking_group import BookingGroup
from .booking import Booking
from .booking_room import BookingRoom
from .booking_guest import BookingGuest
from .pricing_rule import PricingRule
from .folio import FolioItem, FolioPayment, FolioCategory, PaymentMethod

__all__ = [
    "Property",
    "RoomType",
    "Room",
    "RoomHousekeepingStatus",
    "ServiceOffering",
    "BookingStatus",
    "ACTIVE_STATUSES",
    "PRE_ARRIVAL_STATUSES",
    "TERMINAL_STATUSES",
    "normalize_legacy_status",
    "BookingGroup",
    "Booking",
    "BookingRoom",
    "BookingGuest",
    "PricingRule",
    "FolioItem",
    "FolioPayment",
    "FolioCategory",
    "PaymentMethod",
]
