from tablebook.extensions import db
from tablebook.models import Reservation


def _status(client, auth, user_id, rid, status):
    return client.patch(f"/api/reservations/{rid}/status", json={"status": status}, headers=auth(user_id))


# --- restaurant listing ---

def test_restaurant_reservations_sorted_with_summaries(client, auth, book, world):
    book(world.alice, date="2024-06-02", time="18:00", mealId=world.risotto)
    book(world.bob, date="2024-06-01", time="20:00", table_id=world.corner)
    book(world.alice, date="2024-06-01", time="19:00")

    r = client.get(f"/api/reservations/restaurant/{world.bistro}", headers=auth(world.owner))
    assert r.status_code == 200
    body = r.get_json()
    assert body["message"] == "All reservations fetched successfully"

    rows = body["reservations"]
    assert [(x["date"], x["time"]) for x in rows] == [
        ("2024-06-01", "19:00"),
        ("2024-06-01", "20:00"),
        ("2024-06-02", "18:00"),
    ]
    assert rows[0]["user"] == {"id": world.alice, "name": "Alice", "email": "alice@example.com"}
    assert rows[1]["table"] == {"id": world.corner, "tableNumber": 2, "capacity": 2}
    assert rows[0]["meal"] is None
    assert rows[2]["meal"] == {"id": world.risotto, "name": "Risotto", "price": "21.50"}


def test_restaurant_reservations_not_owner_403(client, auth, book, world):
    book(world.alice)
    r = client.get(f"/api/reservations/restaurant/{world.bistro}", headers=auth(world.alice))
    assert r.status_code == 403
    assert r.get_json()["details"] == "You are not the owner of this restaurant"


def test_restaurant_reservations_unknown_restaurant_404(client, auth, world):
    r = client.get("/api/reservations/restaurant/999", headers=auth(world.owner))
    assert r.status_code == 404


# --- status ---

def test_owner_marks_reservation_completed(client, auth, book, world):
    rid = book(world.alice).get_json()["reservation"]["id"]

    r = _status(client, auth, world.owner, rid, "completed")
    assert r.status_code == 200
    body = r.get_json()
    assert body["message"] == "Reservation marked as 'completed' successfully"
    assert body["reservation"]["status"] == "completed"
    assert db.session.get(Reservation, rid).status == "completed"


def test_status_reserved_is_rejected_400(client, auth, book, world):
    rid = book(world.alice).get_json()["reservation"]["id"]

    for value in ("reserved", "done", "", None):
        r = _status(client, auth, world.owner, rid, value)
        assert r.status_code == 400
        assert r.get_json()["code"] == "INVALID_STATUS"
    assert db.session.get(Reservation, rid).status == "reserved"


def test_status_missing_body_400(client, auth, book, world):
    rid = book(world.alice).get_json()["reservation"]["id"]
    r = client.patch(f"/api/reservations/{rid}/status", headers=auth(world.owner))
    assert r.status_code == 400


def test_status_by_reservation_creator_is_forbidden(client, auth, book, world):
    rid = book(world.alice).get_json()["reservation"]["id"]

    r = _status(client, auth, world.alice, rid, "canceled")
    assert r.status_code == 403
    assert db.session.get(Reservation, rid).status == "reserved"


def test_status_unknown_reservation_404(client, auth, world):
    r = _status(client, auth, world.owner, 4242, "canceled")
    assert r.status_code == 404


# --- user listing ---

def test_user_reservations_only_callers_own(client, auth, book, world):
    book(world.alice, mealId=world.risotto)
    book(world.bob, table_id=world.corner)

    r = client.get("/api/reservations/user", headers=auth(world.alice))
    assert r.status_code == 200
    rows = r.get_json()["reservations"]
    assert len(rows) == 1
    assert rows[0]["userId"] == world.alice
    assert rows[0]["restaurant"] == {"id": world.bistro, "name": "Bistro", "address": "1 Main Street"}
    assert rows[0]["table"]["tableNumber"] == 1
    assert rows[0]["meal"]["name"] == "Risotto"
    assert "user" not in rows[0]


def test_user_reservations_empty_list(client, auth, world):
    r = client.get("/api/reservations/user", headers=auth(world.bob))
    assert r.status_code == 200
    assert r.get_json()["reservations"] == []


# --- table listing ---

def test_table_reservations_owner_sees_all(client, auth, book, world):
    book(world.alice, time="20:00")
    book(world.bob, time="18:00")

    r = client.get(f"/api/reservations/table/{world.window}", headers=auth(world.owner))
    assert r.status_code == 200
    rows = r.get_json()["reservations"]
    assert [x["time"] for x in rows] == ["18:00", "20:00"]
    assert rows[0]["user"]["email"] == "bob@example.com"
    assert rows[0]["restaurant"]["name"] == "Bistro"


def test_table_reservations_guest_sees_only_own(client, auth, book, world):
    book(world.alice, time="20:00")
    book(world.bob, time="18:00")

    r = client.get(f"/api/reservations/table/{world.window}", headers=auth(world.alice))
    assert r.status_code == 200
    rows = r.get_json()["reservations"]
    assert [x["userId"] for x in rows] == [world.alice]


def test_table_reservations_unrelated_user_403(client, auth, book, world):
    book(world.alice)
    r = client.get(f"/api/reservations/table/{world.window}", headers=auth(world.bob))
    assert r.status_code == 403


def test_table_reservations_owner_of_empty_table_gets_empty_list(client, auth, world):
    r = client.get(f"/api/reservations/table/{world.corner}", headers=auth(world.owner))
    assert r.status_code == 200
    assert r.get_json()["reservations"] == []


def test_table_reservations_unknown_table_404(client, auth, world):
    r = client.get("/api/reservations/table/999", headers=auth(world.owner))
    assert r.status_code == 404


# --- single reservation ---

def test_get_reservation_by_creator_with_summaries(client, auth, book, world):
    rid = book(world.alice, mealId=world.risotto).get_json()["reservation"]["id"]

    r = client.get(f"/api/reservations/{rid}", headers=auth(world.alice))
    assert r.status_code == 200
    res = r.get_json()["reservation"]
    assert res["user"]["name"] == "Alice"
    assert res["restaurant"]["address"] == "1 Main Street"
    assert res["table"]["capacity"] == 4
    assert res["meal"]["price"] == "21.50"


def test_get_reservation_by_restaurant_owner(client, auth, book, world):
    rid = book(world.alice).get_json()["reservation"]["id"]
    r = client.get(f"/api/reservations/{rid}", headers=auth(world.owner))
    assert r.status_code == 200


def test_get_reservation_by_stranger_403(client, auth, book, world):
    rid = book(world.alice).get_json()["reservation"]["id"]
    r = client.get(f"/api/reservations/{rid}", headers=auth(world.bob))
    assert r.status_code == 403


def test_get_reservation_unknown_404(client, auth, world):
    r = client.get("/api/reservations/4242", headers=auth(world.alice))
    assert r.status_code == 404


# --- end to end ---

def test_booking_flow(client, auth, book, world):
    created = book(world.alice, date="2024-06-01", time="19:00")
    assert created.status_code == 201
    res = created.get_json()["reservation"]
    assert res["status"] == "reserved"

    clash = book(world.bob, date="2024-06-01", time="19:00")
    assert clash.status_code == 400

    done = _status(client, auth, world.owner, res["id"], "completed")
    assert done.status_code == 200
    assert done.get_json()["reservation"]["status"] == "completed"

    # Bob books at his own Diner; Alice does not own it.
    other = client.post(
        "/api/reservations/create",
        json={"tableId": world.booth, "restaurantId": world.diner, "date": "2024-06-01", "time": "19:00"},
        headers=auth(world.bob),
    )
    assert other.status_code == 201
    r = _status(client, auth, world.alice, other.get_json()["reservation"]["id"], "canceled")
    assert r.status_code == 403
