"""Data models for trip planner."""
from .trip import Trip, Location, Itinerary, Transportation, TransportationType, User
from .sharing import TripShare, ShareInvitation, PublicShareLink, SharePermission, InvitationStatus
from .places import PlaceReview, WeatherData, PlaceResult, Directions, BudgetSummary
from .store import TripStore, trip_store

__all__ = [
    "Trip",
    "Location",
    "Itinerary",
    "Transportation",
    "TransportationType",
    "User",
    "TripShare",
    "ShareInvitation",
    "PublicShareLink",
    "SharePermission",
    "InvitationStatus",
    "PlaceReview",
    "WeatherData",
    "PlaceResult",
    "Directions",
    "BudgetSummary",
    "TripStore",
    "trip_store",
]
