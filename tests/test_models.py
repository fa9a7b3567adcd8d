"""Tests for trip, sharing and place models."""
import pytest
from datetime import date, datetime, timedelta

from app.models.trip import Trip, Itinerary, Location, TransportationType, User
from app.models.sharing import ShareInvitation, InvitationStatus, SharePermission
from app.models.places import PlaceReview


class TestTrip:
    """Test Trip validation and derived values."""

    def test_defaults(self):
        """A new trip starts empty and unshared."""
        trip = Trip(user_id="alice", title="Weekend", start_date=date(2026, 5, 1), end_date=date(2026, 5, 3))

        assert trip.id
        assert trip.locations == []
        assert trip.itineraries == []
        assert trip.shared_with == []
        assert trip.total_budget == 0
        assert trip.spent_budget == 0

    def test_remaining_budget_and_duration(self):
        trip = Trip(
            user_id="alice",
            title="Weekend",
            start_date=date(2026, 5, 1),
            end_date=date(2026, 5, 4),
            total_budget=1000,
            spent_budget=250,
        )

        assert trip.remaining_budget == 750
        assert trip.duration_days == 3

    def test_computed_fields_serialized(self):
        trip = Trip(user_id="alice", title="Day trip", start_date=date(2026, 5, 1), end_date=date(2026, 5, 1))
        data = trip.model_dump()

        assert data["remaining_budget"] == 0
        assert data["duration_days"] == 0

    def test_spent_may_exceed_total(self):
        """Overspending is reported, not rejected."""
        trip = Trip(
            user_id="alice",
            title="Splurge",
            start_date=date(2026, 5, 1),
            end_date=date(2026, 5, 2),
            total_budget=100,
            spent_budget=180,
        )
        assert trip.remaining_budget == -80

    def test_validation_constraints(self):
        # end_date before start_date
        with pytest.raises(ValueError):
            Trip(user_id="alice", title="Backwards", start_date=date(2026, 5, 3), end_date=date(2026, 5, 1))

        # empty title
        with pytest.raises(ValueError):
            Trip(user_id="alice", title="", start_date=date(2026, 5, 1), end_date=date(2026, 5, 1))

        # negative budget
        with pytest.raises(ValueError):
            Trip(user_id="alice", title="X", start_date=date(2026, 5, 1), end_date=date(2026, 5, 1), total_budget=-1)


class TestItinerary:
    """Test itinerary entry validation."""

    def test_end_must_follow_start(self):
        start = datetime(2026, 5, 1, 9, 0)
        with pytest.raises(ValueError):
            Itinerary(trip_id="t", location_id="l", start_time=start, end_time=start)

    def test_sort_itineraries(self):
        trip = Trip(user_id="alice", title="Sorted", start_date=date(2026, 5, 1), end_date=date(2026, 5, 2))
        base = datetime(2026, 5, 1, 9, 0)
        late = Itinerary(trip_id=trip.id, location_id="l", order=2, start_time=base, end_time=base + timedelta(hours=1))
        early = Itinerary(trip_id=trip.id, location_id="l", order=1, start_time=base, end_time=base + timedelta(hours=1))
        trip.itineraries = [late, early]

        trip.sort_itineraries()

        assert [e.order for e in trip.itineraries] == [1, 2]


class TestLocation:

    def test_coordinate_bounds(self):
        with pytest.raises(ValueError):
            Location(name="Nowhere", latitude=91, longitude=0)
        with pytest.raises(ValueError):
            Location(name="Nowhere", latitude=0, longitude=181)

    def test_transportation_display_name(self):
        assert TransportationType.PUBLIC_TRANSIT.display_name == "Public transit"
        assert TransportationType("cycling") == TransportationType.CYCLING


class TestUserAndReview:

    def test_user_email_must_contain_at(self):
        with pytest.raises(ValueError):
            User(email="not-an-email", name="Bob")

    def test_review_rating_range(self):
        with pytest.raises(ValueError):
            PlaceReview(location_id="l", user_id="u", rating=0)
        with pytest.raises(ValueError):
            PlaceReview(location_id="l", user_id="u", rating=6)


class TestShareInvitation:

    def test_defaults_and_expiry(self):
        invitation = ShareInvitation(
            trip_id="t",
            invited_email="bob@example.com",
            invited_by="alice",
            token="abc",
            expires_at=datetime.now() + timedelta(days=7),
        )

        assert invitation.status == InvitationStatus.PENDING
        assert invitation.permission == SharePermission.VIEW
        assert not invitation.is_expired()
        assert invitation.is_expired(now=datetime.now() + timedelta(days=8))
