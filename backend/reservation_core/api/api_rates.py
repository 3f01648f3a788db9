from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import AvailabilityRead, AvailabilityRequest, RateQuoteRead, RateRequest
from ..services.availability import check_availability
from ..services.rate_resolver import resolve_rate

router = APIRouter(tags=["rates"])


@router.post("/rates/resolve", response_model=RateQuoteRead)
def resolve_rate_endpoint(*, db: Session = Depends(get_db), rate_in: RateRequest) -> Any:
    """Price a stay night by night from the active pricing rules."""
    return resolve_rate(
        db,
        property_id=rate_in.property_id,
        room_type_id=rate_in.room_type_id,
        check_in=rate_in.check_in,
        check_out=rate_in.check_out,
        guests=rate_in.guests,
        service_ids=rate_in.service_ids,
    )


@router.post("/rates/availability", response_model=AvailabilityRead)
def check_availability_endpoint(*, db: Session = Depends(get_db), request_in: AvailabilityRequest) -> Any:
    return check_availability(
        db,
        property_id=request_in.property_id,
        room_type_id=request_in.room_type_id,
        check_in=request_in.check_in,
        check_out=request_in.check_out,
        guests=request_in.guests,
    )
