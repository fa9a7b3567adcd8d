"""
Trip Service.
CRUD for trips, their locations and itinerary entries, plus budget statistics.
"""
import logging
from math import radians, cos, sin, asin, sqrt

from pydantic import ValidationError

from ..exceptions import NotFoundError, ValidationFailedError
from ..models.places import BudgetSummary
from ..models.store import TripStore, trip_store
from ..models.trip import (
    Itinerary,
    ItineraryCreate,
    ItineraryUpdate,
    Location,
    LocationCreate,
    Transportation,
    Trip,
    TripCreate,
    TripUpdate,
)
from .sharing import PermissionValidator, get_permission_validator

logger = logging.getLogger(__name__)


def haversine(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """
    Calculate the great circle distance in kilometers between two points
    on the earth (specified in decimal degrees)
    """
    lon1, lat1, lon2, lat2 = map(radians, [lon1, lat1, lon2, lat2])

    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * asin(sqrt(a))
    r = 6371  # Radius of earth in kilometers
    return c * r


def _rebuild(model, changes: dict):
    """Re-validate a model with field changes applied."""
    data = model.model_dump()
    data.update(changes)
    try:
        return type(model)(**data)
    except ValidationError as e:
        raise ValidationFailedError(str(e)) from e


class TripService:
    """Trip, location and itinerary operations, permission-checked per caller."""

    def __init__(self, store: TripStore = None, validator: PermissionValidator = None):
        self.store = store or trip_store
        self.validator = validator or get_permission_validator()

    # Trips

    def create_trip(self, user_id: str, payload: TripCreate) -> Trip:
        try:
            trip = Trip(user_id=user_id, **payload.model_dump())
        except ValidationError as e:
            raise ValidationFailedError(str(e)) from e
        self.store.add_trip(trip)
        logger.info(f"Trip {trip.id} created by {user_id}")
        return trip

    def get_trip(self, user_id: str, trip_id: str) -> Trip:
        return self.validator.require_access(user_id, trip_id)

    def update_trip(self, user_id: str, trip_id: str, payload: TripUpdate) -> Trip:
        trip = self.validator.require_edit(user_id, trip_id)
        # only description may be cleared with an explicit null
        changes = {
            k: v for k, v in payload.model_dump(exclude_unset=True).items()
            if v is not None or k == "description"
        }

        updated = _rebuild(trip, changes)
        updated.touch()
        self.store.update_trip(updated)
        logger.info(f"Trip {trip_id} updated by {user_id}: {sorted(changes)}")
        return updated

    def delete_trip(self, user_id: str, trip_id: str):
        self.validator.require_delete(user_id, trip_id)
        self.store.delete_trip(trip_id)
        logger.info(f"Trip {trip_id} deleted by {user_id}")

    def list_user_trips(self, user_id: str, owner_id: str) -> list[Trip]:
        """Trips owned by ``owner_id`` that the caller is allowed to see."""
        trips = [
            t for t in self.store.list_trips()
            if t.user_id == owner_id and self.validator.can_access_trip(user_id, t.id)
        ]
        return sorted(trips, key=lambda t: (t.start_date, t.created_at))

    def list_shared_trips(self, user_id: str) -> list[Trip]:
        trips = []
        for share in self.store.shares_for_user(user_id):
            trip = self.store.get_trip(share.trip_id)
            if trip:
                trips.append(trip)
        return sorted(trips, key=lambda t: (t.start_date, t.created_at))

    # Locations

    def add_location(self, user_id: str, trip_id: str, payload: LocationCreate) -> Location:
        trip = self.validator.require_edit(user_id, trip_id)
        location = Location(**payload.model_dump())
        trip.locations.append(location)
        trip.touch()
        self.store.update_trip(trip)
        logger.info(f"Location {location.id} ({location.name}) added to trip {trip_id}")
        return location

    def delete_location(self, user_id: str, trip_id: str, location_id: str):
        """Remove a location and every itinerary entry that visits it."""
        trip = self.validator.require_edit(user_id, trip_id)
        if not trip.get_location(location_id):
            raise NotFoundError(f"Location {location_id} not found in trip {trip_id}")

        trip.locations = [loc for loc in trip.locations if loc.id != location_id]
        dropped = [e.id for e in trip.itineraries if e.location_id == location_id]
        trip.itineraries = [e for e in trip.itineraries if e.location_id != location_id]
        self._refresh_distances(trip)
        self.store.delete_reviews([location_id])
        trip.touch()
        self.store.update_trip(trip)
        logger.info(f"Location {location_id} deleted from trip {trip_id} ({len(dropped)} itinerary entries removed)")

    # Itineraries

    def _refresh_distances(self, trip: Trip):
        """
        Re-estimate transport legs that carry no explicit distance.
        Each such leg gets the straight-line distance from the previous stop in
        visiting order; the first stop has nothing to measure from.
        """
        previous = None
        for entry in trip.itineraries:
            current = trip.get_location(entry.location_id)
            leg = entry.transportation
            if leg and (leg.distance is None or leg.distance_estimated):
                if previous and current:
                    dist = haversine(previous.longitude, previous.latitude, current.longitude, current.latitude)
                    leg.distance = round(dist, 2)
                    leg.distance_estimated = True
                else:
                    leg.distance = None
                    leg.distance_estimated = False
            previous = current

    def add_itinerary(self, user_id: str, trip_id: str, payload: ItineraryCreate) -> Itinerary:
        trip = self.validator.require_edit(user_id, trip_id)
        if not trip.get_location(payload.location_id):
            raise ValidationFailedError(f"Location {payload.location_id} does not belong to trip {trip_id}")

        data = payload.model_dump(exclude={"transportation", "order"})
        order = payload.order
        if order is None:
            order = max((e.order for e in trip.itineraries), default=-1) + 1
        transportation = None
        if payload.transportation:
            transportation = Transportation(**payload.transportation.model_dump())

        try:
            entry = Itinerary(trip_id=trip_id, order=order, transportation=transportation, **data)
        except ValidationError as e:
            raise ValidationFailedError(str(e)) from e

        trip.itineraries.append(entry)
        trip.sort_itineraries()
        self._refresh_distances(trip)
        trip.touch()
        self.store.update_trip(trip)
        logger.info(f"Itinerary entry {entry.id} added to trip {trip_id}")
        return entry

    def _find_itinerary(self, itinerary_id: str) -> tuple[Trip, Itinerary]:
        trip, entry = self.store.find_itinerary(itinerary_id)
        if not entry:
            raise NotFoundError(f"Itinerary {itinerary_id} not found")
        return trip, entry

    def update_itinerary(self, user_id: str, itinerary_id: str, payload: ItineraryUpdate) -> Itinerary:
        trip, entry = self._find_itinerary(itinerary_id)
        trip = self.validator.require_edit(user_id, trip.id)

        changes = payload.model_dump(exclude_unset=True)
        changes = {k: v for k, v in changes.items() if v is not None or k in ("notes", "budget", "transportation")}
        if "location_id" in changes and not trip.get_location(changes["location_id"]):
            raise ValidationFailedError(f"Location {changes['location_id']} does not belong to trip {trip.id}")
        if changes.get("transportation") is not None:
            existing_id = entry.transportation.id if entry.transportation else None
            transportation = Transportation(**changes["transportation"])
            if existing_id:
                transportation.id = existing_id
            changes["transportation"] = transportation.model_dump()

        updated = _rebuild(entry, changes)
        trip.itineraries = [updated if e.id == itinerary_id else e for e in trip.itineraries]
        trip.sort_itineraries()
        self._refresh_distances(trip)
        trip.touch()
        self.store.update_trip(trip)
        logger.info(f"Itinerary entry {itinerary_id} updated by {user_id}")
        return updated

    def delete_itinerary(self, user_id: str, itinerary_id: str):
        trip, _ = self._find_itinerary(itinerary_id)
        trip = self.validator.require_edit(user_id, trip.id)
        trip.itineraries = [e for e in trip.itineraries if e.id != itinerary_id]
        self._refresh_distances(trip)
        trip.touch()
        self.store.update_trip(trip)
        logger.info(f"Itinerary entry {itinerary_id} deleted from trip {trip.id}")

    # Budget

    def get_budget_summary(self, user_id: str, trip_id: str) -> BudgetSummary:
        trip = self.validator.require_access(user_id, trip_id)

        by_category: dict[str, float] = {"activities": 0.0}
        for entry in trip.itineraries:
            if entry.budget:
                by_category["activities"] += entry.budget
            if entry.transportation and entry.transportation.cost:
                key = f"transportation:{entry.transportation.type.value}"
                by_category[key] = by_category.get(key, 0.0) + entry.transportation.cost

        by_category = {k: round(v, 2) for k, v in by_category.items()}
        return BudgetSummary(
            trip_id=trip.id,
            total_budget=trip.total_budget,
            spent_budget=trip.spent_budget,
            planned_budget=round(sum(by_category.values()), 2),
            remaining=trip.remaining_budget,
            over_budget=trip.spent_budget > trip.total_budget,
            by_category=by_category,
        )


# Global trip service
trip_service = None


def get_trip_service() -> TripService:
    """Get or create the global trip service."""
    global trip_service
    if trip_service is None:
        trip_service = TripService()
    return trip_service
