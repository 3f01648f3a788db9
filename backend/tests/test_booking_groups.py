import pytest

from reservation_core import schemas
from reservation_core.crud import crud_booking
from reservation_core.utils.errors import AlreadyGrouped, NotFound

from reservation_fixtures import make_booking, seed_catalog


def new_group(db, catalog, name="Casamento Silva"):
    return crud_booking.create_group(
        db,
        schemas.BookingGroupCreate(
            property_id=catalog.property.id,
            name=name,
            responsible_name="Carla Silva",
            responsible_email="",
        ),
    )


def test_attach_booking_to_group(db):
    catalog = seed_catalog(db)
    group = new_group(db, catalog)
    assert group.responsible_email is None
    booking = make_booking(db, catalog)
    attached = crud_booking.attach_to_group(db, booking.id, group.id)
    assert attached.group_id == group.id
    # attaching again to the same group is a no-op
    assert crud_booking.attach_to_group(db, booking.id, group.id).group_id == group.id


def test_booking_belongs_to_one_group(db):
    catalog = seed_catalog(db)
    first, second = new_group(db, catalog), new_group(db, catalog, "Congresso")
    booking = make_booking(db, catalog)
    crud_booking.attach_to_group(db, booking.id, first.id)
    with pytest.raises(AlreadyGrouped):
        crud_booking.attach_to_group(db, booking.id, second.id)

    crud_booking.detach_from_group(db, booking.id)
    assert crud_booking.attach_to_group(db, booking.id, second.id).group_id == second.id


def test_group_of_another_property_not_found(db):
    catalog = seed_catalog(db)
    other = seed_catalog(db)
    foreign_group = new_group(db, other)
    booking = make_booking(db, catalog)
    with pytest.raises(NotFound):
        crud_booking.attach_to_group(db, booking.id, foreign_group.id)
    with pytest.raises(NotFound):
        crud_booking.attach_to_group(db, booking.id, 999)
