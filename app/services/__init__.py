"""Services for trip planner."""
from .sharing import SharingManager, PermissionValidator
from .trips import TripService
from .reviews import ReviewService
from .users import UserService
from .external_tools import GoogleMapsService, WeatherService, PlaceRecommendationEngine

__all__ = [
    "SharingManager",
    "PermissionValidator",
    "TripService",
    "ReviewService",
    "UserService",
    "GoogleMapsService",
    "WeatherService",
    "PlaceRecommendationEngine",
]
