"""
Review Service.
Place ratings for locations that appear in trips.
"""
import logging

from ..exceptions import NotFoundError
from ..models.places import PlaceReview
from ..models.store import TripStore, trip_store
from .sharing import PermissionValidator, get_permission_validator

logger = logging.getLogger(__name__)


class ReviewService:
    """Adds and aggregates place reviews."""

    def __init__(self, store: TripStore = None, validator: PermissionValidator = None):
        self.store = store or trip_store
        self.validator = validator or get_permission_validator()

    def add_review(self, user_id: str, location_id: str, rating: int, comment: str = "") -> PlaceReview:
        """Review a location; the reviewer must be able to see the trip it belongs to."""
        trip, location = self.store.find_location(location_id)
        if not location or not self.validator.can_access_trip(user_id, trip.id):
            raise NotFoundError(f"Location {location_id} not found")

        review = PlaceReview(
            location_id=location_id,
            user_id=user_id,
            rating=rating,
            comment=comment,
        )
        self.store.add_review(review)
        logger.info(f"Review {review.id} ({rating}/5) added to location {location_id}")
        return review

    def get_reviews(self, location_id: str) -> dict:
        """Reviews for a location, newest first, with the average rating."""
        reviews = sorted(
            self.store.reviews_for_location(location_id),
            key=lambda r: r.created_at,
            reverse=True,
        )
        average = round(sum(r.rating for r in reviews) / len(reviews), 2) if reviews else 0.0
        return {
            "location_id": location_id,
            "reviews": reviews,
            "average_rating": average,
        }


# Global review service
review_service = None


def get_review_service() -> ReviewService:
    """Get or create the global review service."""
    global review_service
    if review_service is None:
        review_service = ReviewService()
    return review_service
