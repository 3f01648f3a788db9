from datetime import date, datetime
from decimal import Decimal
from itertools import permutations

import pytest
from freezegun import freeze_time

from reservation_core import models
from reservation_core.crud import crud_folio
from reservation_core.database import commit_or_conflict
from reservation_core.services import booking_lifecycle
from reservation_core.services.folio_totals import compute_totals
from reservation_core.utils.errors import (
    BalancePending,
    FolioAlreadyPosted,
    FolioClosed,
    FolioEntryImmutable,
    InvalidAmount,
    InvalidRange,
    RuleLocked,
)

from reservation_fixtures import add_rule, add_service, make_booking, ready_for_check_in, seed_catalog, set_status


def test_totals_fold_is_order_independent():
    items = [{"amount": Decimal("150.00")}, {"amount": Decimal("45.50")}, {"amount": Decimal("4.50")}]
    payments = [{"amount": Decimal("100.00")}, {"amount": Decimal("60.00")}]
    seen = set()
    for item_order in permutations(items):
        for payment_order in permutations(payments):
            seen.add(compute_totals(item_order, payment_order))
    assert len(seen) == 1
    totals = seen.pop()
    assert totals.total_charges == Decimal("200.00")
    assert totals.total_paid == Decimal("160.00")
    assert totals.balance == Decimal("40.00")
    assert not totals.settled


def test_interleaved_writes_match_fold(db):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    crud_folio.add_charge(db, booking.id, "Room", Decimal("300.00"), models.FolioCategory.RATE)
    crud_folio.add_payment(db, booking.id, Decimal("100.00"), models.PaymentMethod.PIX)
    crud_folio.add_charge(db, booking.id, "Minibar", "12.30")
    crud_folio.add_payment(db, booking.id, 50, "card", reference="AUTH-991")
    crud_folio.add_charge(db, booking.id, "Late checkout", Decimal("40"), "adjustment")

    totals = crud_folio.get_totals(db, booking.id)
    assert totals.total_charges == Decimal("352.30")
    assert totals.total_paid == Decimal("150.00")
    assert totals.balance == Decimal("202.30")

    history = crud_folio.get_history(db, booking.id)
    assert [i.description for i in history.items] == ["Room", "Minibar", "Late checkout"]
    assert [p.method for p in history.payments] == ["pix", "card"]
    assert history.totals == totals


@pytest.mark.parametrize("amount", [0, Decimal("-5.00"), "abc", "0.001"])
def test_non_positive_amounts_rejected(db, amount):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    with pytest.raises(InvalidAmount):
        crud_folio.add_charge(db, booking.id, "Bad", amount)
    with pytest.raises(InvalidAmount):
        crud_folio.add_payment(db, booking.id, amount, "cash")
    assert crud_folio.get_totals(db, booking.id).total_charges == Decimal("0.00")


def test_unknown_category_and_method_rejected(db):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    with pytest.raises(InvalidRange) as charge_err:
        crud_folio.add_charge(db, booking.id, "Spa", Decimal("10.00"), "spa")
    assert charge_err.value.field_errors == {"category": "invalid"}
    with pytest.raises(InvalidRange) as payment_err:
        crud_folio.add_payment(db, booking.id, Decimal("10.00"), "cheque")
    assert payment_err.value.field_errors == {"method": "invalid"}
    history = crud_folio.get_history(db, booking.id)
    assert history.items == [] and history.payments == []


def test_close_blocked_while_balance_pending(db):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    crud_folio.add_charge(db, booking.id, "Room", Decimal("310.00"))
    crud_folio.add_payment(db, booking.id, Decimal("300.00"), "cash")

    with pytest.raises(BalancePending) as exc:
        crud_folio.close_folio(db, booking.id)
    assert exc.value.balance == Decimal("10.00")
    db.refresh(booking)
    assert booking.folio_closed_at is None

    crud_folio.add_payment(db, booking.id, Decimal("10.00"), "pix")
    result = crud_folio.close_folio(db, booking.id)
    assert result.totals.balance == Decimal("0.00")
    assert result.booking.folio_closed_at is not None


def test_credit_balance_may_close(db):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    crud_folio.add_charge(db, booking.id, "Room", Decimal("90.00"))
    crud_folio.add_payment(db, booking.id, Decimal("100.00"), "card")
    result = crud_folio.close_folio(db, booking.id)
    assert result.totals.balance == Decimal("-10.00")


def test_closed_folio_is_read_only(db):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    crud_folio.close_folio(db, booking.id)

    with pytest.raises(FolioClosed):
        crud_folio.add_charge(db, booking.id, "Minibar", Decimal("5.00"))
    with pytest.raises(FolioClosed):
        crud_folio.add_payment(db, booking.id, Decimal("5.00"), "cash")
    with pytest.raises(FolioClosed):
        crud_folio.close_folio(db, booking.id)
    assert crud_folio.get_totals(db, booking.id).balance == Decimal("0.00")


def test_folio_rows_are_append_only(db):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    item = crud_folio.add_charge(db, booking.id, "Room", Decimal("100.00"))
    item.amount = Decimal("1.00")
    with pytest.raises(FolioEntryImmutable) as err:
        commit_or_conflict(db)
    assert err.value.status_code == 409

    db.delete(item)
    with pytest.raises(FolioEntryImmutable):
        commit_or_conflict(db)
    assert crud_folio.get_totals(db, booking.id).total_charges == Decimal("100.00")


def test_close_completes_checked_out_booking_and_locks_rules(db):
    catalog = seed_catalog(db)
    rule = add_rule(db, catalog, date(2024, 12, 20), date(2024, 12, 31), price_modifier=Decimal("1.5"))
    booking = make_booking(db, catalog)
    ready_for_check_in(db, catalog, booking)
    booking_lifecycle.check_in(db, booking.id)
    booking_lifecycle.check_out(db, booking.id)
    crud_folio.post_stay_charges(db, booking.id)
    crud_folio.add_payment(db, booking.id, Decimal("300.00"), "pix")

    result = crud_folio.close_folio(db, booking.id)
    assert result.booking_completed is True
    assert result.booking.status == "completed"

    db.refresh(rule)
    assert rule.locked is True
    rule.price_modifier = Decimal("2.0")
    with pytest.raises(RuleLocked):
        commit_or_conflict(db)

    # The failed flush leaves the session usable without a manual rollback.
    reloaded = db.get(models.PricingRule, rule.id)
    assert reloaded.price_modifier == Decimal("1.5")
    db.delete(reloaded)
    with pytest.raises(RuleLocked):
        commit_or_conflict(db)
    assert db.query(models.PricingRule).filter(models.PricingRule.id == rule.id).count() == 1


def test_close_before_checkout_keeps_status(db):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    booking_lifecycle.confirm(db, booking.id)
    result = crud_folio.close_folio(db, booking.id)
    assert result.booking_completed is False
    assert result.booking.status == "confirmed"


def test_post_stay_charges_uses_quote_snapshot(db):
    catalog = seed_catalog(db)
    add_rule(db, catalog, date(2024, 12, 25), date(2024, 12, 25), base_price_override=Decimal("180.00"))
    breakfast = add_service(db, catalog, price="15.00", is_per_person=True, is_per_day=True)
    booking = make_booking(db, catalog, guests=2, selected_service_ids=[breakfast.id])

    with freeze_time("2024-12-24 14:00:00"):
        posted = crud_folio.post_stay_charges(db, booking.id)

    assert [(p.category, p.amount) for p in posted] == [
        ("rate", Decimal("100.00")),
        ("rate", Decimal("180.00")),
        ("service", Decimal("60.00")),
    ]
    assert posted[0].description == "Room rate 2024-12-24"
    assert all(p.posted_at == datetime(2024, 12, 24, 14, 0) for p in posted)
    assert crud_folio.get_totals(db, booking.id).total_charges == booking.total_amount

    with pytest.raises(FolioAlreadyPosted):
        crud_folio.post_stay_charges(db, booking.id)


def test_cancelled_booking_can_still_settle(db):
    catalog = seed_catalog(db)
    booking = make_booking(db, catalog)
    set_status(db, booking, "cancelled")
    crud_folio.add_charge(db, booking.id, "Cancellation fee", Decimal("50.00"))
    crud_folio.add_payment(db, booking.id, Decimal("50.00"), "stripe")
    result = crud_folio.close_folio(db, booking.id)
    assert result.booking.status == "cancelled"
