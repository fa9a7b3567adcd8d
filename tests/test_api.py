"""Tests for the HTTP API."""
import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.main import app
from app.services.external_tools import (
    GoogleMapsService,
    WeatherService,
    get_maps_service,
    get_weather_service,
)


client = TestClient(app)


def _h(user: str) -> dict:
    return {"X-User-Id": user}


def _create_trip(user="alice", **overrides) -> dict:
    payload = {
        "title": "Lisbon long weekend",
        "start_date": "2026-06-10",
        "end_date": "2026-06-13",
        "total_budget": 800,
    }
    payload.update(overrides)
    r = client.post("/api/trips", json=payload, headers=_h(user))
    assert r.status_code == 201
    return r.json()


def _add_location(trip_id, user="alice", name="Belem Tower", lat=38.6916, lon=-9.2160) -> dict:
    r = client.post(
        f"/api/trips/{trip_id}/locations",
        json={"name": name, "latitude": lat, "longitude": lon, "address": "Lisbon"},
        headers=_h(user),
    )
    assert r.status_code == 201
    return r.json()


class TestHealthAndAuth:

    def test_health(self):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "healthy"}

    def test_missing_user_header(self):
        r = client.post("/api/trips", json={"title": "x", "start_date": "2026-06-10", "end_date": "2026-06-11"})
        assert r.status_code == 401
        assert r.json()["code"] == "AUTH_REQUIRED"


class TestTripEndpoints:
    """Test trip CRUD over HTTP."""

    def test_create_and_get(self):
        trip = _create_trip()

        assert trip["user_id"] == "alice"
        assert trip["remaining_budget"] == 800
        assert trip["duration_days"] == 3

        r = client.get(f"/api/trips/{trip['id']}", headers=_h("alice"))
        assert r.status_code == 200
        assert r.json()["title"] == "Lisbon long weekend"

    def test_invalid_dates_rejected(self):
        r = client.post(
            "/api/trips",
            json={"title": "x", "start_date": "2026-06-10", "end_date": "2026-06-01"},
            headers=_h("alice"),
        )
        assert r.status_code == 422

    def test_other_user_gets_404(self):
        trip = _create_trip()
        r = client.get(f"/api/trips/{trip['id']}", headers=_h("mallory"))
        assert r.status_code == 404

    def test_update_and_delete(self):
        trip = _create_trip()

        r = client.put(f"/api/trips/{trip['id']}", json={"spent_budget": 120.5}, headers=_h("alice"))
        assert r.status_code == 200
        assert r.json()["remaining_budget"] == 679.5

        r = client.delete(f"/api/trips/{trip['id']}", headers=_h("alice"))
        assert r.status_code == 200
        assert r.json()["message"] == f"Deleted trip {trip['id']}"
        assert client.get(f"/api/trips/{trip['id']}", headers=_h("alice")).status_code == 404

    def test_user_trips(self):
        trip = _create_trip()
        _create_trip(user="bob")

        r = client.get("/api/users/alice/trips", headers=_h("alice"))
        assert [t["id"] for t in r.json()] == [trip["id"]]

    def test_itinerary_flow_and_budget(self):
        trip = _create_trip()
        belem = _add_location(trip["id"])
        alfama = _add_location(trip["id"], name="Alfama", lat=38.7118, lon=-9.1300)

        r = client.post(f"/api/trips/{trip['id']}/itineraries", json={
            "location_id": belem["id"],
            "start_time": "2026-06-11T09:00:00",
            "end_time": "2026-06-11T11:00:00",
            "budget": 15,
        }, headers=_h("alice"))
        assert r.status_code == 201

        r = client.post(f"/api/trips/{trip['id']}/itineraries", json={
            "location_id": alfama["id"],
            "start_time": "2026-06-11T12:00:00",
            "end_time": "2026-06-11T15:00:00",
            "transportation": {"type": "public_transit", "duration": 35, "cost": 3},
        }, headers=_h("alice"))
        assert r.status_code == 201
        entry = r.json()
        assert entry["order"] == 1
        assert entry["transportation"]["distance"] > 7

        r = client.put(f"/api/itineraries/{entry['id']}", json={"notes": "Take tram 28"}, headers=_h("alice"))
        assert r.status_code == 200
        assert r.json()["notes"] == "Take tram 28"

        r = client.get(f"/api/trips/{trip['id']}/budget", headers=_h("alice"))
        budget = r.json()
        assert budget["planned_budget"] == 18
        assert budget["by_category"]["transportation:public_transit"] == 3
        assert budget["remaining"] == 800

        r = client.delete(f"/api/itineraries/{entry['id']}", headers=_h("alice"))
        assert r.status_code == 200

        r = client.delete(f"/api/trips/{trip['id']}/locations/{belem['id']}", headers=_h("alice"))
        assert r.status_code == 200
        assert client.get(f"/api/trips/{trip['id']}", headers=_h("alice")).json()["itineraries"] == []

    def test_itinerary_with_foreign_location(self):
        trip = _create_trip()
        r = client.post(f"/api/trips/{trip['id']}/itineraries", json={
            "location_id": "not-here",
            "start_time": "2026-06-11T09:00:00",
            "end_time": "2026-06-11T11:00:00",
        }, headers=_h("alice"))

        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_itinerary_with_utc_offset(self):
        trip = _create_trip()
        belem = _add_location(trip["id"])
        url = f"/api/trips/{trip['id']}/itineraries"

        r = client.post(url, json={
            "location_id": belem["id"],
            "start_time": "2026-06-11T10:00:00Z",
            "end_time": "2026-06-11T12:00:00",
            "order": 0,
        }, headers=_h("alice"))
        assert r.status_code == 201
        assert r.json()["start_time"] == "2026-06-11T10:00:00"

        r = client.post(url, json={
            "location_id": belem["id"],
            "start_time": "2026-06-11T13:00:00",
            "end_time": "2026-06-11T15:00:00+01:00",
            "order": 0,
        }, headers=_h("alice"))
        assert r.status_code == 201
        assert r.json()["end_time"] == "2026-06-11T14:00:00"


class TestSharingEndpoints:
    """Test sharing, invitations and public links over HTTP."""

    def test_share_and_revoke(self):
        trip = _create_trip()

        r = client.post(f"/api/trips/{trip['id']}/share", json={"user_id": "bob"}, headers=_h("alice"))
        assert r.status_code == 201
        assert r.json()["permission"] == "view"

        assert client.get(f"/api/trips/{trip['id']}", headers=_h("bob")).status_code == 200
        r = client.put(f"/api/trips/{trip['id']}", json={"title": "Bob's trip"}, headers=_h("bob"))
        assert r.status_code == 403
        assert r.json()["code"] == "PERMISSION_DENIED"

        r = client.get("/api/trips/shared", headers=_h("bob"))
        assert [t["id"] for t in r.json()] == [trip["id"]]

        r = client.put(f"/api/trips/{trip['id']}/share/bob", json={"permission": "edit"}, headers=_h("alice"))
        assert r.json()["permission"] == "edit"
        r = client.put(f"/api/trips/{trip['id']}", json={"title": "Our trip"}, headers=_h("bob"))
        assert r.status_code == 200

        r = client.get(f"/api/trips/{trip['id']}/shares", headers=_h("alice"))
        assert [s["shared_with"] for s in r.json()] == ["bob"]

        r = client.delete(f"/api/trips/{trip['id']}/share/bob", headers=_h("alice"))
        assert r.status_code == 200
        assert client.get(f"/api/trips/{trip['id']}", headers=_h("bob")).status_code == 404

    def test_invitation_flow(self):
        trip = _create_trip()
        r = client.post("/api/users", json={"email": "bob@example.com", "name": "Bob"})
        assert r.status_code == 201
        bob = r.json()

        r = client.post(
            f"/api/trips/{trip['id']}/invitations",
            json={"email": "bob@example.com", "permission": "edit"},
            headers=_h("alice"),
        )
        assert r.status_code == 201
        body = r.json()
        token = body["invitation"]["token"]
        assert body["invitation_link"] == f"{settings.app_url}/invite?trip={trip['id']}&token={token}"

        r = client.post(f"/api/invitations/{token}/accept", headers=_h(bob["id"]))
        assert r.status_code == 200
        assert r.json()["permission"] == "edit"

        r = client.post(f"/api/invitations/{token}/accept", headers=_h(bob["id"]))
        assert r.status_code == 400
        assert r.json()["code"] == "INVALID_INVITATION"

    def test_reject_invitation(self):
        trip = _create_trip()
        r = client.post(f"/api/trips/{trip['id']}/invitations", json={"email": "carol@example.com"}, headers=_h("alice"))
        token = r.json()["invitation"]["token"]

        r = client.post(f"/api/invitations/{token}/reject", headers=_h("carol"))
        assert r.status_code == 200
        assert r.json()["status"] == "rejected"

    def test_public_link(self):
        trip = _create_trip()

        r = client.post(f"/api/trips/{trip['id']}/public-link", json={"expires_in_days": 3}, headers=_h("alice"))
        assert r.status_code == 201
        token = r.json()["token"]

        r = client.get(f"/api/shared/{trip['id']}", params={"token": token})
        assert r.status_code == 200
        assert r.json()["id"] == trip["id"]

        r = client.get(f"/api/shared/{trip['id']}", params={"token": "wrong"})
        assert r.status_code == 404

    def test_public_link_default_expiry(self):
        trip = _create_trip()
        r = client.post(f"/api/trips/{trip['id']}/public-link", headers=_h("alice"))
        assert r.status_code == 201

    def test_share_link(self):
        trip = _create_trip()
        r = client.get(f"/api/trips/{trip['id']}/share-link", headers=_h("alice"))

        assert r.status_code == 200
        assert r.json()["link"] == f"{settings.app_url}/shared?trip={trip['id']}"
        assert r.json()["qr_code_url"].startswith("https://api.qrserver.com/")


class TestReviewEndpoints:

    def test_reviews(self):
        trip = _create_trip()
        location = _add_location(trip["id"])
        client.post(f"/api/trips/{trip['id']}/share", json={"user_id": "bob"}, headers=_h("alice"))

        for user, rating in (("alice", 5), ("bob", 4)):
            r = client.post(
                f"/api/locations/{location['id']}/reviews",
                json={"rating": rating, "comment": "Worth the queue"},
                headers=_h(user),
            )
            assert r.status_code == 201

        r = client.get(f"/api/locations/{location['id']}/reviews")
        body = r.json()
        assert len(body["reviews"]) == 2
        assert body["average_rating"] == 4.5

    def test_review_hidden_location(self):
        trip = _create_trip()
        location = _add_location(trip["id"])

        r = client.post(f"/api/locations/{location['id']}/reviews", json={"rating": 3}, headers=_h("mallory"))
        assert r.status_code == 404

    def test_rating_bounds(self):
        trip = _create_trip()
        location = _add_location(trip["id"])

        r = client.post(f"/api/locations/{location['id']}/reviews", json={"rating": 9}, headers=_h("alice"))
        assert r.status_code == 422

    def test_no_reviews(self):
        r = client.get("/api/locations/unknown/reviews")
        assert r.json() == {"location_id": "unknown", "reviews": [], "average_rating": 0.0}


class TestIntegrationEndpoints:
    """Weather and places endpoints with mocked third-party APIs."""

    @pytest.fixture(autouse=True)
    def clear_overrides(self):
        yield
        app.dependency_overrides.clear()

    def test_weather_by_name(self, monkeypatch):
        monkeypatch.setattr(settings, "weather_provider", "open-meteo")
        monkeypatch.setattr(settings, "google_places_api_key", "")
        monkeypatch.setattr(settings, "google_maps_api_key", "")

        def osm(request):
            return httpx.Response(200, json=[{"lat": "38.72", "lon": "-9.14"}])

        def meteo(request):
            assert request.url.params["latitude"] == "38.72"
            return httpx.Response(200, json={"daily": {
                "time": ["2026-06-11"],
                "weather_code": [0],
                "temperature_2m_max": [27.0],
                "temperature_2m_min": [17.0],
            }})

        app.dependency_overrides[get_maps_service] = lambda: GoogleMapsService(transport=httpx.MockTransport(osm))
        app.dependency_overrides[get_weather_service] = lambda: WeatherService(transport=httpx.MockTransport(meteo))

        r = client.get("/api/weather", params={"location": "Lisbon", "date": "2026-06-11"})

        assert r.status_code == 200
        body = r.json()
        assert body["location"] == "Lisbon"
        assert body["condition"] == "Clear"
        assert body["temperature"] == 22.0

    def test_weather_requires_place(self):
        r = client.get("/api/weather")
        assert r.status_code == 400

    def test_places_search_upstream_failure(self, api_keys):
        app.dependency_overrides[get_maps_service] = lambda: GoogleMapsService(
            transport=httpx.MockTransport(lambda r: httpx.Response(500))
        )

        r = client.get("/api/places/search", params={"query": "pastelaria"})

        assert r.status_code == 502
        assert r.json()["code"] == "EXTERNAL_SERVICE_ERROR"

    def test_directions(self, api_keys):
        body = {
            "status": "OK",
            "routes": [{
                "legs": [{"distance": {"text": "7.1 km"}, "duration": {"text": "18 mins", "value": 1080}}],
                "overview_polyline": {"points": "xyz"},
            }],
        }
        app.dependency_overrides[get_maps_service] = lambda: GoogleMapsService(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=body))
        )

        r = client.get("/api/directions", params={
            "origin_lat": 38.69, "origin_lng": -9.21,
            "destination_lat": 38.71, "destination_lng": -9.13,
            "mode": "walking",
        })

        assert r.status_code == 200
        assert r.json()["duration_seconds"] == 1080

    def test_directions_bad_mode(self):
        r = client.get("/api/directions", params={
            "origin_lat": 38.69, "origin_lng": -9.21,
            "destination_lat": 38.71, "destination_lng": -9.13,
            "mode": "teleport",
        })
        assert r.status_code == 422
