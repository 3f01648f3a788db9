from datetime import date
from decimal import Decimal

import pytest

from reservation_core import models
from reservation_core.crud import crud_folio, crud_room_assignment
from reservation_core.models import Booking
from reservation_core.services import booking_lifecycle
from reservation_core.utils.errors import ConcurrencyConflict

from reservation_fixtures import make_booking, ready_for_check_in, seed_catalog, setup_db


@pytest.fixture
def two_sessions(tmp_path):
    Session = setup_db(f"sqlite:///{tmp_path / 'concurrency.db'}")
    first, second = Session(), Session()
    try:
        yield first, second
    finally:
        first.close()
        second.close()


def test_only_one_of_two_concurrent_check_ins_commits(two_sessions):
    a, b = two_sessions
    catalog = seed_catalog(a)
    booking = ready_for_check_in(a, catalog, make_booking(a, catalog))

    # Both writers read the same version before either commits.
    stale = b.get(Booking, booking.id)
    assert stale.status == "pending"

    booking_lifecycle.check_in(a, booking.id)
    with pytest.raises(ConcurrencyConflict):
        booking_lifecycle.check_in(b, booking.id)

    b.expire_all()
    assert b.get(Booking, booking.id).status == "checked_in"


def test_charge_racing_close_is_rejected(two_sessions):
    a, b = two_sessions
    catalog = seed_catalog(a)
    booking = make_booking(a, catalog)
    stale = b.get(Booking, booking.id)
    assert stale.folio_closed_at is None

    crud_folio.close_folio(a, booking.id)
    with pytest.raises(ConcurrencyConflict):
        crud_folio.add_charge(b, booking.id, "Minibar", Decimal("9.00"))

    b.expire_all()
    assert crud_folio.get_totals(b, booking.id).total_charges == Decimal("0.00")


def test_close_racing_charge_is_rejected(two_sessions, monkeypatch):
    a, b = two_sessions
    catalog = seed_catalog(a)
    booking = make_booking(a, catalog)

    # The charge commits after the closing session has summed the folio.
    original = crud_folio.compute_totals
    posted = []

    def totals_then_charge(items, payments):
        totals = original(items, payments)
        if not posted:
            posted.append(crud_folio.add_charge(a, booking.id, "Minibar", Decimal("9.00")))
        return totals

    monkeypatch.setattr(crud_folio, "compute_totals", totals_then_charge)
    with pytest.raises(ConcurrencyConflict):
        crud_folio.close_folio(b, booking.id)
    monkeypatch.undo()

    b.expire_all()
    reloaded = b.get(Booking, booking.id)
    assert reloaded.folio_closed_at is None
    assert crud_folio.get_totals(b, booking.id).balance == Decimal("9.00")


def test_overlapping_room_assignments_do_not_both_commit(two_sessions, monkeypatch):
    a, b = two_sessions
    catalog = seed_catalog(a)
    room_id = catalog.rooms[0].id
    first = make_booking(a, catalog, date(2024, 12, 24), date(2024, 12, 27))
    second = make_booking(a, catalog, date(2024, 12, 25), date(2024, 12, 28))

    # The other session takes the room after this one found no conflicts.
    original = crud_room_assignment.find_conflicts
    raced = []

    def conflicts_then_race(db, booking, rid):
        conflicts = original(db, booking, rid)
        if db is a and not raced:
            raced.append(crud_room_assignment.assign_room(b, second.id, rid))
        return conflicts

    monkeypatch.setattr(crud_room_assignment, "find_conflicts", conflicts_then_race)
    with pytest.raises(ConcurrencyConflict):
        crud_room_assignment.assign_room(a, first.id, room_id)
    monkeypatch.undo()

    assert raced and raced[0].created
    a.expire_all()
    links = a.query(models.BookingRoom).filter(models.BookingRoom.room_id == room_id).all()
    assert [link.booking_id for link in links] == [second.id]
    assert crud_room_assignment.primary_room(a, first.id) is None
