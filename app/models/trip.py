"""
Trip models - Trips, locations, itinerary entries and users.
"""
from pydantic import BaseModel, Field, computed_field, field_validator, model_validator
from typing import Optional
from datetime import date, datetime, timezone
from enum import Enum
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


class TransportationType(str, Enum):
    """How the traveller gets to an itinerary stop."""
    WALKING = "walking"
    DRIVING = "driving"
    PUBLIC_TRANSIT = "public_transit"
    CYCLING = "cycling"

    @property
    def display_name(self) -> str:
        return {
            TransportationType.WALKING: "Walking",
            TransportationType.DRIVING: "Driving",
            TransportationType.PUBLIC_TRANSIT: "Public transit",
            TransportationType.CYCLING: "Cycling",
        }[self]


class Location(BaseModel):
    """A place that belongs to a trip."""
    id: str = Field(default_factory=_new_id)
    name: str = Field(..., min_length=1, description="Name of the place")
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = Field(default="", description="Formatted address")
    place_id: Optional[str] = Field(None, description="Google Maps Place ID")
    rating: Optional[float] = Field(None, ge=0, le=5)
    photo_url: Optional[str] = None


class Transportation(BaseModel):
    """Transport leg leading to an itinerary stop."""
    id: str = Field(default_factory=_new_id)
    type: TransportationType
    duration: int = Field(..., ge=0, description="Duration in minutes")
    distance: Optional[float] = Field(None, ge=0, description="Distance in kilometers")
    distance_estimated: bool = Field(
        default=False,
        description="Distance was derived from the previous stop rather than given"
    )
    cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class Itinerary(BaseModel):
    """A scheduled visit to a location within a trip."""
    id: str = Field(default_factory=_new_id)
    trip_id: str
    location_id: str
    order: int = Field(default=0, ge=0, description="Position within the trip")
    start_time: datetime
    end_time: datetime
    transportation: Optional[Transportation] = None
    notes: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    photos: list[str] = Field(default_factory=list, description="Photo URLs")

    @field_validator("start_time", "end_time")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        """Store times as naive UTC so aware and naive inputs compare."""
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def check_time_range(self) -> "Itinerary":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class Trip(BaseModel):
    """Top-level trip record owned by a user."""
    id: str = Field(default_factory=_new_id)
    user_id: str = Field(..., description="Owner of the trip")
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: date
    end_date: date
    locations: list[Location] = Field(default_factory=list)
    itineraries: list[Itinerary] = Field(default_factory=list)
    shared_with: list[str] = Field(
        default_factory=list,
        description="User IDs the trip is shared with"
    )
    total_budget: float = Field(default=0.0, ge=0)
    spent_budget: float = Field(default=0.0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def check_date_range(self) -> "Trip":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @computed_field
    @property
    def remaining_budget(self) -> float:
        return self.total_budget - self.spent_budget

    @computed_field
    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days

    def get_location(self, location_id: str) -> Optional[Location]:
        """Find a location of this trip by ID."""
        for location in self.locations:
            if location.id == location_id:
                return location
        return None

    def get_itinerary(self, itinerary_id: str) -> Optional[Itinerary]:
        """Find an itinerary entry of this trip by ID."""
        for entry in self.itineraries:
            if entry.id == itinerary_id:
                return entry
        return None

    def sort_itineraries(self):
        """Keep entries in visiting order."""
        self.itineraries.sort(key=lambda e: (e.order, e.start_time))

    def touch(self):
        self.updated_at = datetime.now()


class User(BaseModel):
    """A registered user."""
    id: str = Field(default_factory=_new_id)
    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    avatar: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v.strip()


# Request payloads

class TripCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: date
    end_date: date
    total_budget: float = Field(default=0.0, ge=0)
    spent_budget: float = Field(default=0.0, ge=0)


class TripUpdate(BaseModel):
    """Partial trip update; unset fields are left untouched."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_budget: Optional[float] = Field(None, ge=0)
    spent_budget: Optional[float] = Field(None, ge=0)


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = ""
    place_id: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    photo_url: Optional[str] = None


class TransportationCreate(BaseModel):
    type: TransportationType
    duration: int = Field(..., ge=0)
    distance: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class ItineraryCreate(BaseModel):
    location_id: str
    start_time: datetime
    end_time: datetime
    order: Optional[int] = Field(None, ge=0, description="Defaults to the next free position")
    transportation: Optional[TransportationCreate] = None
    notes: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    photos: list[str] = Field(default_factory=list)


class ItineraryUpdate(BaseModel):
    """Partial itinerary update; unset fields are left untouched."""
    location_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    order: Optional[int] = Field(None, ge=0)
    transportation: Optional[TransportationCreate] = None
    notes: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    photos: Optional[list[str]] = None


class UserCreate(BaseModel):
    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    avatar: Optional[str] = None
