from datetime import date
from decimal import Decimal

from fastapi.testclient import TestClient

from reservation_core.database import get_db
from reservation_core.main import app

from reservation_fixtures import add_rule, seed_catalog, setup_db

API = "/api/v1"


def setup_app():
    Session = setup_db()

    def override_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    return Session


def seed(Session):
    db = Session()
    catalog = seed_catalog(db)
    add_rule(db, catalog, date(2024, 12, 20), date(2024, 12, 31), price_modifier=Decimal("1.5"))
    ids = {
        "property_id": catalog.property.id,
        "room_type_id": catalog.room_type.id,
        "room_ids": [r.id for r in catalog.rooms],
    }
    db.close()
    return ids


def test_resolve_rate_endpoint():
    Session = setup_app()
    ids = seed(Session)
    client = TestClient(app)
    res = client.post(
        f"{API}/rates/resolve",
        json={
            "property_id": ids["property_id"],
            "room_type_id": ids["room_type_id"],
            "check_in": "2024-12-24",
            "check_out": "2024-12-26",
            "guests": 2,
        },
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert [Decimal(str(n["amount"])) for n in body["nightly"]] == [Decimal("150.00"), Decimal("150.00")]
    assert Decimal(str(body["total"])) == Decimal("300.00")
    assert body["nightly"][0]["night"] == "2024-12-24"
    app.dependency_overrides.clear()


def test_resolve_rate_rejects_empty_range():
    Session = setup_app()
    ids = seed(Session)
    client = TestClient(app)
    res = client.post(
        f"{API}/rates/resolve",
        json={
            "property_id": ids["property_id"],
            "room_type_id": ids["room_type_id"],
            "check_in": "2024-12-24",
            "check_out": "2024-12-24",
        },
    )
    assert res.status_code == 422
    assert res.json()["detail"]["code"] == "invalid_range"
    app.dependency_overrides.clear()


def test_full_stay_through_the_api():
    Session = setup_app()
    ids = seed(Session)
    client = TestClient(app)

    res = client.post(
        f"{API}/bookings",
        json={
            "property_id": ids["property_id"],
            "room_type_id": ids["room_type_id"],
            "check_in": "2024-12-24",
            "check_out": "2024-12-26",
            "total_guests": 2,
            "guest_name": "Ana Souza",
            "guest_email": "",
        },
    )
    assert res.status_code == 201, res.text
    booking = res.json()
    booking_id = booking["id"]
    assert booking["status"] == "pending"
    assert booking["guest_email"] is None
    assert Decimal(str(booking["total_amount"])) == Decimal("300.00")

    res = client.post(f"{API}/bookings/{booking_id}/transition", json={"target_status": "checked_in"})
    assert res.status_code == 409
    detail = res.json()["detail"]
    assert detail["code"] == "guard_error"
    assert detail["reason"] == "MissingRoom"

    res = client.get(f"{API}/bookings/{booking_id}/actions")
    assert res.status_code == 200
    actions = {a["action"]: a for a in res.json()["actions"]}
    assert actions["check_in"]["reason"] == "MissingRoom"
    assert actions["confirm"]["allowed"] is True

    res = client.post(f"{API}/bookings/{booking_id}/rooms", json={"room_id": ids["room_ids"][0]})
    assert res.status_code == 201
    assert res.json()["link"]["is_primary"] is True

    res = client.post(f"{API}/bookings/{booking_id}/transition", json={"target_status": "checked_in"})
    assert res.json()["detail"]["reason"] == "MissingPrimaryGuest"

    res = client.post(f"{API}/bookings/{booking_id}/participants", json={"full_name": "Ana Souza"})
    assert res.status_code == 201
    assert res.json()["is_primary"] is True

    res = client.post(f"{API}/bookings/{booking_id}/transition", json={"target_status": "checked_in"})
    assert res.status_code == 200, res.text
    assert res.json()["status"] == "checked_in"

    res = client.post(f"{API}/bookings/{booking_id}/folio/stay-charges")
    assert res.status_code == 201
    assert len(res.json()) == 2

    res = client.post(f"{API}/bookings/{booking_id}/folio/charges", json={"description": "Minibar", "amount": "10.00"})
    assert res.status_code == 201

    res = client.post(f"{API}/bookings/{booking_id}/folio/payments", json={"amount": "300.00", "method": "pix"})
    assert res.status_code == 201

    res = client.post(f"{API}/bookings/{booking_id}/transition", json={"target_status": "checked_out"})
    assert res.status_code == 200
    assert Decimal(str(res.json()["balance_due"])) == Decimal("10.00")

    res = client.post(f"{API}/bookings/{booking_id}/folio/close")
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "balance_pending"
    assert res.json()["detail"]["field_errors"]["balance"] == "10.00"

    client.post(f"{API}/bookings/{booking_id}/folio/payments", json={"amount": "10.00", "method": "cash"})
    res = client.post(f"{API}/bookings/{booking_id}/folio/close")
    assert res.status_code == 200, res.text
    closed = res.json()
    assert closed["booking_completed"] is True
    assert closed["status"] == "completed"

    res = client.get(f"{API}/bookings/{booking_id}/folio")
    folio = res.json()
    assert Decimal(str(folio["totals"]["balance"])) == Decimal("0.00")
    assert len(folio["items"]) == 3
    assert folio["closed_at"] is not None

    res = client.post(f"{API}/bookings/{booking_id}/folio/charges", json={"description": "Late", "amount": "5.00"})
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "folio_closed"

    res = client.get(f"{API}/bookings/{booking_id}/quote")
    assert res.status_code == 200
    assert res.json()["matches"] is True
    app.dependency_overrides.clear()


def test_invalid_amount_and_unknown_booking():
    Session = setup_app()
    seed(Session)
    client = TestClient(app)
    res = client.post(f"{API}/bookings/999/folio/charges", json={"description": "X", "amount": "1.00"})
    assert res.status_code == 404
    assert res.json()["detail"]["field_errors"] == {"booking_id": "not_found"}

    res = client.post(f"{API}/bookings/999/folio/payments", json={"amount": "1.00", "method": "barter"})
    assert res.status_code == 422
    app.dependency_overrides.clear()


def test_groups_endpoints():
    Session = setup_app()
    ids = seed(Session)
    client = TestClient(app)
    res = client.post(
        f"{API}/booking-groups",
        json={"property_id": ids["property_id"], "name": "Congresso", "responsible_name": "Carla"},
    )
    assert res.status_code == 201, res.text
    group_id = res.json()["id"]

    booking = client.post(
        f"{API}/bookings",
        json={
            "property_id": ids["property_id"],
            "room_type_id": ids["room_type_id"],
            "check_in": "2025-01-10",
            "check_out": "2025-01-12",
            "guest_name": "Bruno Lima",
        },
    ).json()
    res = client.post(f"{API}/booking-groups/{group_id}/bookings/{booking['id']}")
    assert res.status_code == 200
    assert res.json()["group_id"] == group_id
    app.dependency_overrides.clear()


def test_healthz():
    client = TestClient(app)
    assert client.get("/healthz").json() == {"status": "ok"}
