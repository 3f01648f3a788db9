from .base import EmptyStringModel
from .rates import RateRequest, NightlyRateRead, RateQuoteRead, AvailabilityRequest, AvailabilityRead
from .booking import (
    BookingCreate,
    BookingRead,
    TransitionRequest,
    TransitionRead,
    ActionCheckRead,
    BookingActionsRead,
    QuoteReproductionRead,
)
from .rooms import RoomAssignRequest, BookingRoomRead, AssignmentRead, UnassignRead
from .participants import ParticipantCreate, ParticipantRead
from .folio import (
    ChargeCreate,
    PaymentCreate,
    FolioItemRead,
    PaymentRead,
    FolioTotalsRead,
    FolioRead,
    FolioCloseRead,
)
from .groups import BookingGroupCreate, BookingGroupRead

__all__ = [
    "EmptyStringModel",
    "RateRequest",
    "NightlyRateRead",
    "RateQuoteRead",
    "AvailabilityRequest",
    "AvailabilityRead",
    "BookingCreate",
    "BookingRead",
    "TransitionRequest",
    "TransitionRead",
    "ActionCheckRead",
    "BookingActionsRead",
    "QuoteReproductionRead",
    "RoomAssignRequest",
    "BookingRoomRead",
    "AssignmentRead",
    "UnassignRead",
    "ParticipantCreate",
    "ParticipantRead",
    "ChargeCreate",
    "PaymentCreate",
    "FolioItemRead",
    "PaymentRead",
    "FolioTotalsRead",
    "FolioRead",
    "FolioCloseRead",
    "BookingGroupCreate",
    "BookingGroupRead",
]
