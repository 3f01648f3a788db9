from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String, event, inspect
from sqlalchemy.orm import relationship

from .base import BaseModel
from ..utils.errors import RuleLocked


class PricingRule(BaseModel):
    """Seasonal or promotional price adjustment for a property.

    A rule without ``room_type_id`` applies to every room type of the
    property. ``start_date`` and ``end_date`` are both inclusive nights.
    """

    __tablename__ = "pricing_rules"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    room_type_id = Column(Integer, ForeignKey("room_types.id"), nullable=True, index=True)
    name = Column(String, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    base_price_override = Column(Numeric(12, 2), nullable=True)
    price_modifier = Column(Numeric(8, 4), nullable=True)
    min_stay = Column(Integer, nullable=True)
    max_stay = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default="active", index=True)
    # Set once a booking quoted against this rule is completed
    locked = Column(Boolean, nullable=False, default=False)

    room_type = relationship("RoomType")


PRICING_FIELDS = (
    "property_id",
    "room_type_id",
    "start_date",
    "end_date",
    "base_price_override",
    "price_modifier",
    "min_stay",
    "max_stay",
    "status",
)


def _guard_locked_rule(mapper, connection, target):  # noqa: ANN001
    state = inspect(target)
    locked_history = state.attrs.locked.history
    was_locked = bool(locked_history.deleted[0]) if locked_history.deleted else bool(target.locked)
    if not was_locked:
        return
    changed = [name for name in PRICING_FIELDS if state.attrs[name].history.has_changes()]
    if changed or locked_history.has_changes():
        raise RuleLocked(field_errors={name: "locked" for name in changed or ["locked"]})


def _guard_locked_delete(mapper, connection, target):  # noqa: ANN001
    if target.locked:
        raise RuleLocked(field_errors={"pricing_rule_id": str(target.id)})


event.listen(PricingRule, "before_update", _guard_locked_rule)
event.listen(PricingRule, "before_delete", _guard_locked_delete)
