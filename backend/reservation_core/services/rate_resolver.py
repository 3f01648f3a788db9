"""Nightly rate resolution.

``price_stay`` is the pure pricing core: it only sees the room type's base
price, the candidate pricing rules and the selected add-on services, so two
calls with the same inputs always produce the same quote. ``resolve_rate``
is the database-facing wrapper that loads those inputs for a stay request.

Rule selection per night:

* only active rules of the property whose inclusive window contains the night
  and whose room type is either absent or the requested one are candidates;
* a rule scoped to the room type outranks an all-room-types rule;
* among equally specific rules the most recently created wins, then the
  highest id, so the choice never depends on query order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models
from ..core.config import settings
from ..utils.errors import InvalidRange, NotFound, StayLengthRejected

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


@dataclass
class NightlyRate:
    night: date
    amount: Decimal
    rule_id: Optional[int] = None


@dataclass
class RateQuote:
    room_type_id: int
    check_in: date
    check_out: date
    guests: int
    nights: int
    nightly: list[NightlyRate]
    rooms_subtotal: Decimal
    services_subtotal: Decimal
    total: Decimal
    average_nightly: Decimal
    rule_ids: list[int] = field(default_factory=list)
    service_ids: list[int] = field(default_factory=list)
    property_id: Optional[int] = None
    currency: str = "BRL"

    @property
    def nightly_schedule(self) -> list[Decimal]:
        return [n.amount for n in self.nightly]

    def snapshot(self, resolved_at: Optional[datetime] = None) -> dict[str, Any]:
        """JSON-safe record stored on the booking so the quote can be reproduced."""
        return {
            "nightly": [
                {"night": n.night.isoformat(), "amount": str(n.amount), "rule_id": n.rule_id}
                for n in self.nightly
            ],
            "rooms_subtotal": str(self.rooms_subtotal),
            "services_subtotal": str(self.services_subtotal),
            "total": str(self.total),
            "rule_ids": list(self.rule_ids),
            "service_ids": list(self.service_ids),
            "currency": self.currency,
            "resolved_at": resolved_at.isoformat() if resolved_at else None,
        }


def _to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def _read_field(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def stay_nights(check_in: date, check_out: date) -> int:
    if check_in is None or check_out is None:
        raise InvalidRange("Check-in and check-out dates are required", {"check_in": "required"})
    nights = (check_out - check_in).days
    if nights <= 0:
        raise InvalidRange(
            "Check-out date must be after check-in date",
            {"check_out": "must_be_after_check_in"},
        )
    return nights


def _is_active(rule: Any) -> bool:
    return str(_read_field(rule, "status") or "").strip().lower() == "active"


def _applies(rule: Any, night: date, room_type_id: int) -> bool:
    scope = _read_field(rule, "room_type_id")
    if scope is not None and scope != room_type_id:
        return False
    start = _read_field(rule, "start_date")
    end = _read_field(rule, "end_date")
    if start is None or end is None:
        return False
    return start <= night <= end


def _precedence(rule: Any) -> tuple:
    return (
        1 if _read_field(rule, "room_type_id") is not None else 0,
        _read_field(rule, "created_at") or datetime.min,
        _read_field(rule, "id") or 0,
    )


def select_rule(rules: Iterable[Any], night: date, room_type_id: int) -> Any:
    """Return the winning rule for ``night`` or ``None`` when none applies."""
    candidates = [r for r in rules if _applies(r, night, room_type_id)]
    if not candidates:
        return None
    return max(candidates, key=_precedence)


def apply_rule(base_price: Decimal, rule: Any) -> Decimal:
    if rule is None:
        return base_price
    override = _to_decimal(_read_field(rule, "base_price_override"))
    if override is not None:
        return override
    modifier = _to_decimal(_read_field(rule, "price_modifier"))
    if modifier is not None:
        return base_price * modifier
    return base_price


def _check_stay_bounds(rule: Any, nights: int) -> None:
    min_stay = _read_field(rule, "min_stay")
    max_stay = _read_field(rule, "max_stay")
    if min_stay is not None and nights < min_stay:
        raise StayLengthRejected(_read_field(rule, "id"), nights, min_stay=min_stay, max_stay=max_stay)
    if max_stay is not None and nights > max_stay:
        raise StayLengthRejected(_read_field(rule, "id"), nights, min_stay=min_stay, max_stay=max_stay)


def service_cost(service: Any, guests: int, nights: int) -> Decimal:
    cost = _to_decimal(_read_field(service, "price"), Decimal("0"))
    if _read_field(service, "is_per_person"):
        cost *= guests
    if _read_field(service, "is_per_day"):
        cost *= nights
    return cost


def price_stay(
    *,
    base_price: Any,
    rules: Sequence[Any],
    room_type_id: int,
    check_in: date,
    check_out: date,
    guests: int = 1,
    services: Sequence[Any] = (),
    property_id: Optional[int] = None,
    currency: Optional[str] = None,
) -> RateQuote:
    """Price a stay from plain inputs.

    ``rules`` and ``services`` may be ORM rows or mappings. Inactive rules and
    rules of another property are ignored here as well, so callers may pass an
    unfiltered list.
    """
    nights = stay_nights(check_in, check_out)
    if guests is None or guests < 1:
        raise InvalidRange("At least one guest is required", {"total_guests": "must_be_positive"})
    base = _to_decimal(base_price)
    if base is None:
        raise InvalidRange("Room type has no base price", {"base_price": "missing"})

    usable = [
        r for r in rules
        if _is_active(r) and (property_id is None or _read_field(r, "property_id") in (None, property_id))
    ]

    nightly: list[NightlyRate] = []
    contributing: list[Any] = []
    seen_ids: set = set()
    for offset in range(nights):
        night = check_in + timedelta(days=offset)
        rule = select_rule(usable, night, room_type_id)
        amount = _money(apply_rule(base, rule))
        rule_id = _read_field(rule, "id") if rule is not None else None
        nightly.append(NightlyRate(night=night, amount=amount, rule_id=rule_id))
        if rule is not None and id(rule) not in seen_ids:
            seen_ids.add(id(rule))
            contributing.append(rule)

    for rule in contributing:
        _check_stay_bounds(rule, nights)

    rooms_subtotal = _money(sum((n.amount for n in nightly), Decimal("0")))
    services_subtotal = _money(sum((service_cost(s, guests, nights) for s in services), Decimal("0")))
    total = _money(rooms_subtotal + services_subtotal)

    return RateQuote(
        property_id=property_id,
        room_type_id=room_type_id,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        nights=nights,
        nightly=nightly,
        rooms_subtotal=rooms_subtotal,
        services_subtotal=services_subtotal,
        total=total,
        average_nightly=_money(rooms_subtotal / nights),
        rule_ids=[_read_field(r, "id") for r in contributing if _read_field(r, "id") is not None],
        service_ids=[_read_field(s, "id") for s in services if _read_field(s, "id") is not None],
        currency=(currency or settings.DEFAULT_CURRENCY or "BRL").upper(),
    )


def load_room_type(db: Session, property_id: int, room_type_id: int) -> models.RoomType:
    prop = db.query(models.Property).filter(models.Property.id == property_id).first()
    if prop is None:
        raise NotFound("property", property_id)
    room_type = (
        db.query(models.RoomType)
        .filter(models.RoomType.id == room_type_id, models.RoomType.property_id == property_id)
        .first()
    )
    if room_type is None:
        raise NotFound("room_type", room_type_id, "Room type not found or inaccessible")
    return room_type


def load_candidate_rules(
    db: Session, property_id: int, room_type_id: int, check_in: date, check_out: date
) -> list[models.PricingRule]:
    last_night = check_out - timedelta(days=1)
    return (
        db.query(models.PricingRule)
        .filter(
            models.PricingRule.property_id == property_id,
            models.PricingRule.status == "active",
            or_(
                models.PricingRule.room_type_id == room_type_id,
                models.PricingRule.room_type_id.is_(None),
            ),
            models.PricingRule.start_date <= last_night,
            models.PricingRule.end_date >= check_in,
        )
        .order_by(models.PricingRule.id)
        .all()
    )


def load_services(db: Session, property_id: int, service_ids: Iterable[int]) -> list[models.ServiceOffering]:
    wanted = list(dict.fromkeys(service_ids or []))
    if not wanted:
        return []
    rows = (
        db.query(models.ServiceOffering)
        .filter(
            models.ServiceOffering.id.in_(wanted),
            models.ServiceOffering.property_id == property_id,
            models.ServiceOffering.status == "active",
        )
        .all()
    )
    by_id = {row.id: row for row in rows}
    missing = [sid for sid in wanted if sid not in by_id]
    if missing:
        raise NotFound(
            "service",
            missing[0],
            f"Services not found or inactive: {', '.join(str(m) for m in missing)}",
        )
    return [by_id[sid] for sid in wanted]


def resolve_rate(
    db: Session,
    property_id: int,
    room_type_id: int,
    check_in: date,
    check_out: date,
    guests: int = 1,
    service_ids: Iterable[int] = (),
) -> RateQuote:
    """Resolve the nightly schedule and total for a stay request."""
    stay_nights(check_in, check_out)
    room_type = load_room_type(db, property_id, room_type_id)
    rules = load_candidate_rules(db, property_id, room_type_id, check_in, check_out)
    services = load_services(db, property_id, service_ids)
    currency = getattr(room_type.property, "currency", None)
    quote = price_stay(
        base_price=room_type.base_price,
        rules=rules,
        room_type_id=room_type_id,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        services=services,
        property_id=property_id,
        currency=currency,
    )
    logger.info(
        "rate.resolved property_id=%s room_type_id=%s nights=%s total=%s rules=%s",
        property_id,
        room_type_id,
        quote.nights,
        quote.total,
        quote.rule_ids,
    )
    return quote
