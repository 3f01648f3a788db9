"""Error taxonomy for the reservation core.

Every exception here is an expected, recoverable condition. Each carries a
machine-readable ``code`` and ``field_errors`` so a caller can render the
specific remediation instead of a generic failure banner.
"""

import enum
from typing import Dict, Optional

from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
    reason: Optional[str] = None,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"message": message, "field_errors": field_errors}
    if reason:
        detail["code"] = reason
    return HTTPException(status_code=code, detail=detail)


class GuardReason(str, enum.Enum):
    """Why a lifecycle action is unavailable."""

    MISSING_ROOM = "MissingRoom"
    MISSING_PRIMARY_GUEST = "MissingPrimaryGuest"
    WRONG_STATE = "WrongState"


class ReservationError(Exception):
    code = "reservation_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Reservation operation failed"

    def __init__(self, message: Optional[str] = None, field_errors: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.field_errors = dict(field_errors or {})
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"message": self.message, "code": self.code, "field_errors": self.field_errors}

    def as_http_exception(self) -> HTTPException:
        return error_response(self.message, self.field_errors, self.status_code, reason=self.code)


class NotFound(ReservationError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"

    def __init__(self, entity: str, identifier=None, message: Optional[str] = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(
            message or f"{entity.replace('_', ' ').capitalize()} not found",
            {f"{entity}_id": "not_found"},
        )


class InvalidRange(ReservationError):
    code = "invalid_range"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid date range"


class StayLengthRejected(ReservationError):
    code = "stay_length_rejected"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Stay length not permitted"

    def __init__(self, rule_id, nights: int, min_stay=None, max_stay=None):
        self.rule_id = rule_id
        self.nights = nights
        self.min_stay = min_stay
        self.max_stay = max_stay
        if min_stay is not None and nights < min_stay:
            field = {"nights": f"min_stay:{min_stay}"}
            message = f"Stay length not permitted: minimum stay is {min_stay} nights"
        else:
            field = {"nights": f"max_stay:{max_stay}"}
            message = f"Stay length not permitted: maximum stay is {max_stay} nights"
        field["pricing_rule_id"] = str(rule_id)
        super().__init__(message, field)


class GuardError(ReservationError):
    code = "guard_error"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Action unavailable"

    def __init__(self, reason: GuardReason, message: Optional[str] = None, current_status=None, target_status=None):
        self.reason = GuardReason(reason)
        self.current_status = current_status
        self.target_status = target_status
        fields = {"reason": self.reason.value}
        if current_status is not None:
            fields["current_status"] = str(getattr(current_status, "value", current_status))
        if target_status is not None:
            fields["target_status"] = str(getattr(target_status, "value", target_status))
        super().__init__(message or self.default_message, fields)

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["reason"] = self.reason.value
        return detail


class BalancePending(ReservationError):
    code = "balance_pending"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Folio has an outstanding balance"

    def __init__(self, balance):
        self.balance = balance
        super().__init__(
            f"Folio has an outstanding balance of {balance}",
            {"balance": str(balance)},
        )


# Name used by the CloseFolio contract.
BalancePendingError = BalancePending


class InvalidAmount(ReservationError):
    code = "invalid_amount"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Amount must be greater than zero"


class FolioClosed(ReservationError):
    code = "folio_closed"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Folio is closed and read-only"


class FolioAlreadyPosted(ReservationError):
    code = "folio_already_posted"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Stay charges were already posted to this folio"


class FolioEntryImmutable(ReservationError):
    code = "folio_entry_immutable"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Folio entries cannot be changed or removed; post an adjustment instead"


class RoomConflict(ReservationError):
    code = "room_conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Room is already assigned to another booking for these dates"

    def __init__(self, room_id, conflicting_booking_ids):
        self.room_id = room_id
        self.conflicting_booking_ids = list(conflicting_booking_ids)
        super().__init__(
            self.default_message,
            {
                "room_id": str(room_id),
                "conflicting_booking_ids": ",".join(str(b) for b in self.conflicting_booking_ids),
            },
        )


class PrimaryGuestRequired(ReservationError):
    code = "primary_guest_required"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Promote another participant to primary before removing this one"


class AlreadyGrouped(ReservationError):
    code = "already_grouped"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Booking already belongs to another group"


class RuleLocked(ReservationError):
    code = "rule_locked"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Pricing rule was used by a completed booking and can no longer change"


class InvalidStatus(ReservationError):
    code = "invalid_status"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Unknown booking status"


class ConcurrencyConflict(ReservationError):
    code = "concurrency_conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Booking was modified concurrently; reload and retry"
