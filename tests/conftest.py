"""Shared fixtures for trip planner tests."""
import pytest
from datetime import date

from app.config import settings
from app.models.store import TripStore, trip_store
from app.models.trip import TripCreate


@pytest.fixture(autouse=True)
def reset_store():
    """Every test starts with an empty global store."""
    trip_store.reset()
    yield
    trip_store.reset()


@pytest.fixture
def store():
    """A private store for service-level tests."""
    return TripStore()


@pytest.fixture
def api_keys(monkeypatch):
    """Configure third-party API keys for the duration of a test."""
    monkeypatch.setattr(settings, "google_maps_api_key", "maps-key")
    monkeypatch.setattr(settings, "google_places_api_key", "places-key")
    monkeypatch.setattr(settings, "weather_api_key", "weather-key")


@pytest.fixture
def trip_payload():
    return TripCreate(
        title="Kyoto in spring",
        description="Temples and gardens",
        start_date=date(2026, 4, 1),
        end_date=date(2026, 4, 5),
        total_budget=1500.0,
    )
