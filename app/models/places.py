"""
Places models - Reviews, weather, search results and budget summaries.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
import uuid


class PlaceReview(BaseModel):
    """A user's rating of a location."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    location_id: str
    user_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    created_at: datetime = Field(default_factory=datetime.now)


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class WeatherData(BaseModel):
    """Forecast for one place on one day."""
    location: str
    date: date
    temperature: Optional[float] = Field(None, description="Degrees in the configured units")
    condition: str = Field(..., description="Short condition, e.g. 'Clear' or 'Rain'")
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    description: Optional[str] = None


class PlaceResult(BaseModel):
    """A place returned by a places search."""
    id: str
    name: str
    address: str = ""
    latitude: float
    longitude: float
    rating: Optional[float] = None
    photo_url: Optional[str] = None


class Directions(BaseModel):
    """Route between two points."""
    distance: str
    duration: str
    duration_seconds: int
    polyline: str = ""


class BudgetSummary(BaseModel):
    """Budget statistics for a trip."""
    trip_id: str
    total_budget: float
    spent_budget: float
    planned_budget: float = Field(..., description="Itinerary budgets plus transport costs")
    remaining: float
    over_budget: bool
    by_category: dict[str, float] = Field(default_factory=dict)
