"""
Integration tests for the events API.

Tests end-to-end scheduling flows:
- Creating events with on-demand entities
- Conflict rejections (422 with the full verdict body)
- Updates, status changes and deletion
- List, calendar and dry-run validation endpoints
- Live notifications over the events WebSocket
"""

import pytest

from backend.src.models import City, Event


def event_payload(**overrides):
    payload = {
        "title": "Morning Match",
        "event_date": "2024-01-10",
        "event_time": "10:00",
        "event_type": "Match",
        "city": "Riyadh",
    }
    payload.update(overrides)
    return payload


class TestCreateEvent:

    def test_create(self, test_client):
        response = test_client.post("/api/events", json=event_payload(
            venue="King Fahd Stadium",
            observers=["OB01"],
            sng="SNG-1",
            teams=["Al Hilal", "Al Nassr"],
            metadata={"broadcaster": "SSC"},
        ))

        assert response.status_code == 201
        event = response.json()
        assert event["city"]["name"] == "Riyadh"
        assert event["venue"]["name"] == "King Fahd Stadium"
        assert event["event_type"]["code"] == "MAT"
        assert event["event_time"] == "10:00:00"
        assert [o["code"] for o in event["observers"]] == ["OB01"]
        assert [s["code"] for s in event["sngs"]] == ["SNG-1"]
        assert event["teams"] == ["Al Hilal", "Al Nassr"]
        assert event["metadata"] == {"broadcaster": "SSC"}
        assert event["status"] == "scheduled"

    def test_travel_conflict_body(self, test_client, test_db_session, riyadh_jeddah):
        assert test_client.post("/api/events", json=event_payload(sngs=["SNG-1"])).status_code == 201

        response = test_client.post("/api/events", json=event_payload(
            title="Afternoon Match", city="Jeddah", event_time="13:00", sngs=["SNG-1"],
        ))

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["valid"] is False
        assert detail["error_type"] == "insufficient_travel_time_after"
        assert detail["reason_code"] == "insufficient_travel_time_after"
        assert detail["resource_kind"] == "sng"
        assert detail["resource_code"] == "SNG-1"
        assert detail["details"]["previous_event"] == "Morning Match"
        assert detail["details"]["required_travel_hours"] == 5.0
        assert detail["details"]["available_hours"] == 3.0
        assert detail["details"]["shortage_hours"] == 2.0
        assert "Required: 5.0 hours, Available: 3.0 hours" in detail["message"]
        assert test_db_session.query(Event).count() == 1

    def test_travel_ok(self, test_client, riyadh_jeddah):
        test_client.post("/api/events", json=event_payload(sngs=["SNG-1"]))

        response = test_client.post("/api/events", json=event_payload(
            title="Evening Match", city="Jeddah", event_time="16:00", sngs=["SNG-1"],
        ))

        assert response.status_code == 201

    def test_observer_daily_limit(self, test_client, test_db_session):
        test_client.post("/api/events", json=event_payload(observers=["OB01"]))

        response = test_client.post("/api/events", json=event_payload(
            title="Night Match", city="Dammam", event_time="21:00", observers=["OB01"],
        ))

        assert response.status_code == 422
        assert response.json()["detail"]["error_type"] == "daily_observer_limit"
        assert test_db_session.query(City).filter(City.name == "Dammam").count() == 0

    def test_schema_errors(self, test_client):
        response = test_client.post("/api/events", json=event_payload(city="  "))
        assert response.status_code == 422

        response = test_client.post("/api/events", json=event_payload(event_date="2024-13-45"))
        assert response.status_code == 422


class TestUpdateEvent:

    def test_update_own_slot(self, test_client):
        event = test_client.post("/api/events", json=event_payload(sngs=["SNG-1"])).json()

        response = test_client.patch(f"/api/events/{event['id']}", json={"event_time": "10:30"})

        assert response.status_code == 200
        assert response.json()["event_time"] == "10:30:00"

    def test_update_into_conflict(self, test_client, riyadh_jeddah):
        test_client.post("/api/events", json=event_payload(sngs=["SNG-1"]))
        other = test_client.post("/api/events", json=event_payload(
            title="Evening Match", city="Jeddah", event_time="16:00", sngs=["SNG-1"],
        )).json()

        response = test_client.patch(f"/api/events/{other['id']}", json={"event_time": "12:00"})

        assert response.status_code == 422
        assert response.json()["detail"]["details"]["shortage_hours"] == 3.0
        assert test_client.get(f"/api/events/{other['id']}").json()["event_time"] == "16:00:00"

    def test_update_assignments_by_id(self, test_client):
        event = test_client.post("/api/events", json=event_payload(sngs=["SNG-1"])).json()
        sng2 = test_client.post("/api/resources/sngs", json={"code": "SNG-2"}).json()

        response = test_client.patch(f"/api/events/{event['id']}", json={"sng_id": sng2["id"]})

        assert response.status_code == 200
        assert [s["code"] for s in response.json()["sngs"]] == ["SNG-2"]

    def test_update_unknown_reference(self, test_client):
        event = test_client.post("/api/events", json=event_payload()).json()

        response = test_client.patch(f"/api/events/{event['id']}", json={"city_id": 999})

        assert response.status_code == 404

    def test_update_venue_city_mismatch(self, test_client):
        event = test_client.post("/api/events", json=event_payload(venue="King Fahd Stadium")).json()
        other = test_client.post("/api/events", json=event_payload(
            title="Jeddah Match", city="Jeddah", venue="King Abdullah Sports City",
        )).json()

        response = test_client.patch(
            f"/api/events/{event['id']}", json={"venue_id": other["venue"]["id"]}
        )
        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "venue_id"

        response = test_client.patch(
            f"/api/events/{event['id']}", json={"city_id": other["city"]["id"]}
        )
        assert response.status_code == 200
        assert response.json()["city"]["name"] == "Jeddah"
        assert response.json()["venue"] is None

    def test_update_missing_event(self, test_client):
        assert test_client.patch("/api/events/999", json={"title": "X"}).status_code == 404

    def test_status_change(self, test_client):
        event = test_client.post("/api/events", json=event_payload()).json()

        response = test_client.patch(f"/api/events/{event['id']}/status", json={"status": "postponed"})
        assert response.status_code == 200
        assert response.json()["status"] == "postponed"

        response = test_client.patch(f"/api/events/{event['id']}/status", json={"status": "archived"})
        assert response.status_code == 422

        assert test_client.patch("/api/events/999/status", json={"status": "completed"}).status_code == 404


class TestDeleteEvent:

    def test_delete(self, test_client):
        event = test_client.post("/api/events", json=event_payload(sngs=["SNG-1"])).json()

        assert test_client.delete(f"/api/events/{event['id']}").status_code == 204
        assert test_client.get(f"/api/events/{event['id']}").status_code == 404
        assert test_client.delete(f"/api/events/{event['id']}").status_code == 404

        # Slot is free again
        response = test_client.post("/api/events", json=event_payload(sngs=["SNG-1"]))
        assert response.status_code == 201


class TestEventQueries:

    def test_list(self, test_client):
        test_client.post("/api/events", json=event_payload(title="A"))
        test_client.post("/api/events", json=event_payload(title="B", event_date="2024-01-12"))
        test_client.post("/api/events", json=event_payload(title="C", event_date="2024-02-01", status="cancelled"))

        body = test_client.get("/api/events").json()
        assert body["total"] == 3
        assert [e["title"] for e in body["items"]] == ["C", "B", "A"]

        body = test_client.get("/api/events?start_date=2024-01-01&end_date=2024-01-31").json()
        assert body["total"] == 2

        body = test_client.get("/api/events?status=cancelled").json()
        assert [e["title"] for e in body["items"]] == ["C"]

    def test_calendar(self, test_client):
        test_client.post("/api/events", json=event_payload(title="Late", event_time="20:00"))
        test_client.post("/api/events", json=event_payload(title="Early", event_time="08:00"))

        response = test_client.get("/api/events/calendar?year=2024&month=1")

        assert response.status_code == 200
        days = response.json()["days"]
        assert [e["title"] for e in days["2024-01-10"]] == ["Early", "Late"]

        assert test_client.get("/api/events/calendar?year=2024&month=13").status_code == 422

    def test_validate_endpoint(self, test_client, test_db_session, riyadh_jeddah):
        riyadh, jeddah = riyadh_jeddah
        event = test_client.post("/api/events", json=event_payload(sngs=["SNG-1"])).json()
        sng_id = event["sngs"][0]["id"]

        response = test_client.post("/api/events/validate", json={
            "resource_kind": "sng",
            "resource_id": sng_id,
            "city_id": jeddah.id,
            "event_date": "2024-01-10",
            "event_time": "13:00",
        })
        assert response.status_code == 200
        verdict = response.json()
        assert verdict["valid"] is False
        assert verdict["reason_code"] == "insufficient_travel_time_after"

        response = test_client.post("/api/events/validate", json={
            "resource_kind": "sng",
            "resource_id": sng_id,
            "city_id": jeddah.id,
            "event_date": "2024-01-10",
            "event_time": "13:00",
            "exclude_event_id": event["id"],
        })
        assert response.json()["valid"] is True
        assert test_db_session.query(Event).count() == 1

    def test_validate_unknown_resource(self, test_client):
        response = test_client.post("/api/events/validate", json={
            "resource_kind": "observer", "resource_id": 999, "event_date": "2024-01-10",
        })

        assert response.status_code == 404


class TestEventsWebSocket:

    def test_created_event_broadcast(self, test_client):
        with test_client.websocket_connect("/api/events/ws") as websocket:
            response = test_client.post("/api/events", json=event_payload())
            assert response.status_code == 201

            message = websocket.receive_json()

        assert message["type"] == "event.created"
        assert message["action"] == "created"
        assert message["event"]["id"] == response.json()["id"]

    def test_ping(self, test_client):
        with test_client.websocket_connect("/api/events/ws") as websocket:
            websocket.send_text("ping")
            assert websocket.receive_text() == "pong"


class TestHealth:

    def test_health(self, test_client):
        body = test_client.get("/health").json()

        assert body["status"] == "healthy"
