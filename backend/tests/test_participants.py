import pytest

from reservation_core import schemas
from reservation_core.crud import crud_participant
from reservation_core.utils.errors import NotFound, PrimaryGuestRequired

from reservation_fixtures import make_booking, seed_catalog


def add(db, booking, name, **kw):
    return crud_participant.add_participant(db, booking.id, schemas.ParticipantCreate(full_name=name, **kw))


def test_first_participant_becomes_primary(db):
    booking = make_booking(db, seed_catalog(db))
    ana = add(db, booking, "Ana Souza")
    bruno = add(db, booking, "Bruno Lima")
    assert ana.is_primary
    assert not bruno.is_primary
    assert crud_participant.primary_guest(db, booking.id).id == ana.id


def test_adding_primary_demotes_current(db):
    booking = make_booking(db, seed_catalog(db))
    ana = add(db, booking, "Ana Souza")
    bruno = add(db, booking, "Bruno Lima", is_primary=True)
    db.refresh(ana)
    assert bruno.is_primary
    assert not ana.is_primary
    assert sum(p.is_primary for p in crud_participant.list_participants(db, booking.id)) == 1


def test_set_primary_swaps(db):
    booking = make_booking(db, seed_catalog(db))
    ana = add(db, booking, "Ana Souza")
    bruno = add(db, booking, "Bruno Lima")
    crud_participant.set_primary_participant(db, bruno.id)
    assert crud_participant.primary_guest(db, booking.id).id == bruno.id
    db.refresh(ana)
    assert not ana.is_primary


def test_primary_participant_cannot_be_removed(db):
    booking = make_booking(db, seed_catalog(db))
    ana = add(db, booking, "Ana Souza")
    with pytest.raises(PrimaryGuestRequired) as exc:
        crud_participant.remove_participant(db, ana.id)
    assert "only participant" in exc.value.message

    bruno = add(db, booking, "Bruno Lima")
    with pytest.raises(PrimaryGuestRequired) as exc:
        crud_participant.remove_participant(db, ana.id)
    assert "Promote another participant" in exc.value.message

    crud_participant.remove_participant(db, bruno.id)
    assert [p.id for p in crud_participant.list_participants(db, booking.id)] == [ana.id]


def test_blank_fields_become_none():
    participant = schemas.ParticipantCreate(full_name="  Ana  ", email="", document="   ")
    assert participant.full_name == "Ana"
    assert participant.email is None
    assert participant.document is None


def test_unknown_participant(db):
    with pytest.raises(NotFound):
        crud_participant.set_primary_participant(db, 999)
