"""
API Routes for trips, locations, itineraries, budgets and users.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from .deps import get_current_user_id
from ..models.places import BudgetSummary
from ..models.trip import (
    Itinerary,
    ItineraryCreate,
    ItineraryUpdate,
    Location,
    LocationCreate,
    Trip,
    TripCreate,
    TripUpdate,
    User,
    UserCreate,
)
from ..services.trips import get_trip_service
from ..services.users import get_user_service


router = APIRouter(prefix="/api", tags=["trips"])


class MessageResponse(BaseModel):
    message: str


# Trips

@router.post("/trips", response_model=Trip, status_code=201)
async def create_trip(payload: TripCreate, user_id: str = Depends(get_current_user_id)):
    """Create a new trip owned by the caller."""
    return get_trip_service().create_trip(user_id, payload)


@router.get("/trips/shared", response_model=list[Trip])
async def get_shared_trips(user_id: str = Depends(get_current_user_id)):
    """Trips other users have shared with the caller."""
    return get_trip_service().list_shared_trips(user_id)


@router.get("/trips/{trip_id}", response_model=Trip)
async def get_trip(trip_id: str, user_id: str = Depends(get_current_user_id)):
    return get_trip_service().get_trip(user_id, trip_id)


@router.put("/trips/{trip_id}", response_model=Trip)
async def update_trip(trip_id: str, payload: TripUpdate, user_id: str = Depends(get_current_user_id)):
    return get_trip_service().update_trip(user_id, trip_id, payload)


@router.delete("/trips/{trip_id}", response_model=MessageResponse)
async def delete_trip(trip_id: str, user_id: str = Depends(get_current_user_id)):
    get_trip_service().delete_trip(user_id, trip_id)
    return MessageResponse(message=f"Deleted trip {trip_id}")


@router.get("/users/{owner_id}/trips", response_model=list[Trip])
async def get_user_trips(owner_id: str, user_id: str = Depends(get_current_user_id)):
    """Trips owned by a user, limited to those visible to the caller."""
    return get_trip_service().list_user_trips(user_id, owner_id)


# Locations

@router.post("/trips/{trip_id}/locations", response_model=Location, status_code=201)
async def add_location(trip_id: str, payload: LocationCreate, user_id: str = Depends(get_current_user_id)):
    return get_trip_service().add_location(user_id, trip_id, payload)


@router.delete("/trips/{trip_id}/locations/{location_id}", response_model=MessageResponse)
async def delete_location(trip_id: str, location_id: str, user_id: str = Depends(get_current_user_id)):
    """Delete a location and the itinerary entries that visit it."""
    get_trip_service().delete_location(user_id, trip_id, location_id)
    return MessageResponse(message=f"Deleted location {location_id}")


# Itineraries

@router.post("/trips/{trip_id}/itineraries", response_model=Itinerary, status_code=201)
async def add_itinerary(trip_id: str, payload: ItineraryCreate, user_id: str = Depends(get_current_user_id)):
    return get_trip_service().add_itinerary(user_id, trip_id, payload)


@router.put("/itineraries/{itinerary_id}", response_model=Itinerary)
async def update_itinerary(
    itinerary_id: str,
    payload: ItineraryUpdate,
    user_id: str = Depends(get_current_user_id),
):
    return get_trip_service().update_itinerary(user_id, itinerary_id, payload)


@router.delete("/itineraries/{itinerary_id}", response_model=MessageResponse)
async def delete_itinerary(itinerary_id: str, user_id: str = Depends(get_current_user_id)):
    get_trip_service().delete_itinerary(user_id, itinerary_id)
    return MessageResponse(message=f"Deleted itinerary {itinerary_id}")


# Budget

@router.get("/trips/{trip_id}/budget", response_model=BudgetSummary)
async def get_budget_summary(trip_id: str, user_id: str = Depends(get_current_user_id)):
    return get_trip_service().get_budget_summary(user_id, trip_id)


# Users

@router.post("/users", response_model=User, status_code=201)
async def register_user(payload: UserCreate):
    return get_user_service().register(payload.email, payload.name, payload.avatar)


@router.get("/users/{user_id}", response_model=User)
async def get_user(user_id: str):
    return get_user_service().get_user(user_id)
