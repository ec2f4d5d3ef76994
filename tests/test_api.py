"""End-to-end HTTP tests: grid, bookings, availability, tags, pilots."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import DAY, NEXT_DAY, add_marks
from tandemboard.services.grid.snapshot_cache import SnapshotRedisStore


def booking_payload(**overrides) -> dict:
    payload = {
        "name": "Alice",
        "pickup_location": "Hotel Alpina",
        "number_of_people": 2,
        "booking_date": DAY.isoformat(),
        "time_slot": "9:45",
    }
    payload.update(overrides)
    return payload


def grid_row(client, time_slot, day=DAY):
    response = client.get("/grid/day", params={"date": day.isoformat()})
    assert response.status_code == 200
    return next(r for r in response.json()["rows"] if r["time_slot"] == time_slot)


@pytest.fixture
def failing_commit(monkeypatch):
    def fail(self):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    def enable():
        monkeypatch.setattr(Session, "commit", fail)

    return enable


class TestGridEndpoints:

    def test_empty_day(self, client):
        response = client.get("/grid/day", params={"date": DAY.isoformat()})
        data = response.json()

        assert response.status_code == 200
        assert data["resources"] == []
        assert len(data["rows"]) == 8
        assert all(row["cells"] == [] for row in data["rows"])

    def test_packed_row(self, client, db, pilots, tag):
        add_marks(db, [(p, "9:45") for p in pilots[:4]])
        client.post("/bookings/", json=booking_payload(tag_id=tag.id))

        row = grid_row(client, "9:45")

        assert [c["kind"] for c in row["cells"]] == ["booking", "hidden", "available", "available"]
        assert row["cells"][0]["width"] == 2
        assert row["cells"][0]["color"] == "#22c55e"
        assert row["cells"][0]["booking"]["tag_name"] == "Paid"
        assert row["cells"][0]["action"] == "edit"
        assert row["cells"][2]["action"] == "create"
        assert row["capacity"] == 4
        assert row["free_columns"] == 2

    def test_unplaced_bookings_reported(self, client, db, pilots):
        add_marks(db, [(pilots[0], "11:00")])
        created = client.post("/bookings/", json=booking_payload(time_slot="11:00")).json()

        data = client.get("/grid/day", params={"date": DAY.isoformat()}).json()
        assert data["unplaced_booking_ids"] == [created["id"]]

    def test_click_available_cell(self, client, db, pilots):
        add_marks(db, [(pilots[2], "14:00"), (pilots[0], "14:00")])

        response = client.get(
            "/grid/day/click",
            params={"date": DAY.isoformat(), "time_slot": "14:00", "column": 1},
        )

        assert response.json() == {
            "action": "create",
            "date": DAY.isoformat(),
            "time_slot": "14:00",
            "resource_id": pilots[0].id,
            "max_people": 2,
            "booking_id": None,
        }

    def test_click_booking_and_unavailable(self, client, db, pilots):
        add_marks(db, [(pilots[0], "9:45")])
        created = client.post("/bookings/", json=booking_payload(number_of_people=1)).json()
        add_marks(db, [(pilots[1], "11:00")])

        params = {"date": DAY.isoformat(), "time_slot": "9:45"}
        edit = client.get("/grid/day/click", params={**params, "column": 0}).json()
        assert edit["action"] == "edit"
        assert edit["booking_id"] == created["id"]

        nothing = client.get("/grid/day/click", params={**params, "column": 1}).json()
        assert nothing["action"] is None

    def test_click_out_of_range(self, client):
        response = client.get(
            "/grid/day/click",
            params={"date": DAY.isoformat(), "time_slot": "9:45", "column": 0},
        )
        assert response.status_code == 404

    def test_manual_invalidate(self, client, redis):
        SnapshotRedisStore(redis).put(DAY, {"availability": [], "bookings": []}, 0)
        response = client.post("/grid/invalidate")
        assert response.json() == {"deleted_keys": 1, "dates": "all"}

    def test_invalidate_empty_list_keeps_cache(self, client, redis):
        store = SnapshotRedisStore(redis)
        store.put(DAY, {"availability": [], "bookings": []}, 0)

        response = client.post("/grid/invalidate", json=[])

        assert response.json() == {"deleted_keys": 0, "dates": []}
        assert store.get(DAY) is not None


class TestBookingEndpoints:

    def test_create_and_read(self, client):
        response = client.post("/bookings/", json=booking_payload(email=" a@b.co "))
        assert response.status_code == 201
        created = response.json()
        assert created["email"] == "a@b.co"
        assert created["created_at"] == created["updated_at"]

        fetched = client.get(f"/bookings/{created['id']}").json()
        assert fetched == created

    @pytest.mark.parametrize("overrides", [
        {"name": "   "},
        {"pickup_location": ""},
        {"number_of_people": 0},
        {"number_of_people": 101},
        {"time_slot": "10:00"},
        {"email": "not-an-email"},
    ])
    def test_invalid_form_rejected(self, client, overrides):
        response = client.post("/bookings/", json=booking_payload(**overrides))
        assert response.status_code == 422

    def test_list_by_date(self, client):
        client.post("/bookings/", json=booking_payload(name="First"))
        client.post("/bookings/", json=booking_payload(name="Other day", booking_date=NEXT_DAY.isoformat()))
        client.post("/bookings/", json=booking_payload(name="Second"))

        names = [b["name"] for b in client.get("/bookings/", params={"date": DAY.isoformat()}).json()]
        assert names == ["First", "Second"]

    def test_write_refreshes_grid(self, client, db, pilots):
        add_marks(db, [(p, "9:45") for p in pilots[:4]])
        assert grid_row(client, "9:45")["free_columns"] == 4  # now cached

        client.post("/bookings/", json=booking_payload(number_of_people=3))
        assert grid_row(client, "9:45")["free_columns"] == 1

    def test_patch_moves_booking_between_dates(self, client, db, pilots):
        add_marks(db, [(pilots[0], "9:45")])
        add_marks(db, [(pilots[0], "9:45")], day=NEXT_DAY)
        created = client.post("/bookings/", json=booking_payload(number_of_people=1)).json()
        assert grid_row(client, "9:45")["cells"][0]["kind"] == "booking"
        assert grid_row(client, "9:45", NEXT_DAY)["cells"][0]["kind"] == "available"

        response = client.patch(f"/bookings/{created['id']}", json={"booking_date": NEXT_DAY.isoformat()})

        assert response.status_code == 200
        assert response.json()["booking_date"] == NEXT_DAY.isoformat()
        assert grid_row(client, "9:45")["cells"][0]["kind"] == "available"
        assert grid_row(client, "9:45", NEXT_DAY)["cells"][0]["kind"] == "booking"

    def test_patch_null_does_not_clear_required_field(self, client):
        created = client.post("/bookings/", json=booking_payload()).json()
        updated = client.patch(f"/bookings/{created['id']}", json={"name": None, "phone": "+41 79"}).json()
        assert updated["name"] == "Alice"
        assert updated["phone"] == "+41 79"

    def test_delete(self, client):
        created = client.post("/bookings/", json=booking_payload()).json()
        assert client.delete(f"/bookings/{created['id']}").status_code == 204
        assert client.get(f"/bookings/{created['id']}").status_code == 404

    def test_missing_booking(self, client):
        assert client.patch("/bookings/999", json={"name": "X"}).status_code == 404
        assert client.delete("/bookings/999").status_code == 404

    def test_failed_save_reports_error(self, client, failing_commit):
        failing_commit()
        response = client.post("/bookings/", json=booking_payload())

        assert response.status_code == 503
        assert response.json() == {"detail": "Failed to save booking. Please try again."}

    def test_unknown_pilot_rejected(self, client):
        response = client.post("/bookings/", json=booking_payload(pilot_id=999))

        assert response.status_code == 422
        assert response.json() == {"detail": "Pilot 999 does not exist."}
        assert client.get("/bookings/", params={"date": DAY.isoformat()}).json() == []

    def test_patch_unknown_tag_rejected(self, client, tag):
        created = client.post("/bookings/", json=booking_payload(tag_id=tag.id)).json()

        response = client.patch(f"/bookings/{created['id']}", json={"tag_id": tag.id + 1})

        assert response.status_code == 422
        assert client.get(f"/bookings/{created['id']}").json()["tag_id"] == tag.id


class TestAvailabilityEndpoints:

    def test_week(self, client, db, pilots):
        add_marks(db, [(pilots[0], "7:30")])

        data = client.get("/availability/week", params={"pilot_id": pilots[0].id, "date": "2026-10-21"}).json()

        assert data["week_start"] == DAY.isoformat()
        assert len(data["days"]) == 7
        assert data["days"][0]["slots"]["7:30"] is True
        assert data["days"][0]["slots"]["9:45"] is False

    def test_mark_and_unmark(self, client, pilots):
        body = {"pilot_id": pilots[0].id, "day": DAY.isoformat(), "time_slot": "11:00"}

        assert client.put("/availability/", json=body).json()["available"] is True
        assert grid_row(client, "11:00")["capacity"] == 1

        assert client.request("DELETE", "/availability/", json=body).json()["available"] is False
        assert grid_row(client, "11:00")["capacity"] == 0

    def test_toggle_and_toggle_day(self, client, pilots):
        body = {"pilot_id": pilots[1].id, "day": DAY.isoformat()}

        assert client.post("/availability/toggle", json={**body, "time_slot": "9:45"}).json()["available"] is True
        assert client.post("/availability/toggle-day", json=body).json()["available"] is True
        rows = client.get("/grid/day", params={"date": DAY.isoformat()}).json()["rows"]
        assert all(row["capacity"] == 1 for row in rows)

        assert client.post("/availability/toggle-day", json=body).json()["available"] is False
        assert grid_row(client, "9:45")["capacity"] == 0

    def test_staff_forbidden(self, client, pilots):
        body = {"pilot_id": pilots[4].id, "day": DAY.isoformat(), "time_slot": "9:45"}
        response = client.post("/availability/toggle", json=body)
        assert response.status_code == 403
        assert response.json()["detail"] == "Only pilots can edit availability."

    def test_invalid_time_slot(self, client, pilots):
        body = {"pilot_id": pilots[0].id, "day": DAY.isoformat(), "time_slot": "25:00"}
        assert client.put("/availability/", json=body).status_code == 422

    def test_failed_toggle_reverts(self, client, pilots, failing_commit):
        body = {"pilot_id": pilots[0].id, "day": DAY.isoformat(), "time_slot": "9:45"}
        failing_commit()

        response = client.post("/availability/toggle", json=body)

        assert response.status_code == 503
        assert grid_row(client, "9:45")["capacity"] == 0


class TestTagsAndPilots:

    def test_create_and_list_tags(self, client):
        response = client.post("/tags/", json={"name": "VIP", "color": "#FF00AA"})
        assert response.status_code == 201
        assert response.json()["color"] == "#ff00aa"
        assert [t["name"] for t in client.get("/tags/").json()] == ["VIP"]

    def test_duplicate_tag(self, client, tag):
        response = client.post("/tags/", json={"name": "Paid", "color": "#000000"})
        assert response.status_code == 409

    def test_invalid_tag_color(self, client):
        assert client.post("/tags/", json={"name": "X", "color": "red"}).status_code == 422

    def test_tags_are_not_editable(self, client, tag):
        assert client.patch(f"/tags/{tag.id}", json={"name": "Y"}).status_code == 405
        assert client.delete(f"/tags/{tag.id}").status_code == 405

    def test_pilots(self, client):
        created = client.post("/pilots/", json={"display_name": "Marco"}).json()
        assert created["role"] == "pilot"
        assert client.get(f"/pilots/{created['id']}").json()["display_name"] == "Marco"
        assert client.get("/pilots/999").status_code == 404

    def test_health(self, client):
        assert client.get("/health").json() == {"database": True, "redis": True}
