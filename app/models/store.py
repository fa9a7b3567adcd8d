"""
Trip store - In-memory storage for trips, shares, invitations, reviews and users.
"""
from typing import Optional

from .trip import Trip, Location, Itinerary, User
from .sharing import TripShare, ShareInvitation, PublicShareLink
from .places import PlaceReview


# In-memory storage (would be replaced with database in production)
class TripStore:
    """Simple in-memory store keyed by record ID."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Drop every record."""
        self._trips: dict[str, Trip] = {}
        self._shares: dict[str, TripShare] = {}
        self._invitations: dict[str, ShareInvitation] = {}  # keyed by token
        self._public_links: dict[str, PublicShareLink] = {}  # keyed by token
        self._reviews: dict[str, PlaceReview] = {}
        self._users: dict[str, User] = {}

    # Trips

    def add_trip(self, trip: Trip):
        self._trips[trip.id] = trip

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        return self._trips.get(trip_id)

    def update_trip(self, trip: Trip):
        self._trips[trip.id] = trip

    def delete_trip(self, trip_id: str):
        """Delete a trip together with its shares, invitations, public links and reviews."""
        trip = self._trips.pop(trip_id, None)
        if trip:
            self.delete_reviews([loc.id for loc in trip.locations])
        self._shares = {k: s for k, s in self._shares.items() if s.trip_id != trip_id}
        self._invitations = {k: i for k, i in self._invitations.items() if i.trip_id != trip_id}
        self._public_links = {k: p for k, p in self._public_links.items() if p.trip_id != trip_id}

    def list_trips(self) -> list[Trip]:
        return list(self._trips.values())

    def find_location(self, location_id: str) -> tuple[Optional[Trip], Optional[Location]]:
        """Find the trip owning a location."""
        for trip in self._trips.values():
            location = trip.get_location(location_id)
            if location:
                return trip, location
        return None, None

    def find_itinerary(self, itinerary_id: str) -> tuple[Optional[Trip], Optional[Itinerary]]:
        """Find the trip owning an itinerary entry."""
        for trip in self._trips.values():
            entry = trip.get_itinerary(itinerary_id)
            if entry:
                return trip, entry
        return None, None

    # Shares

    def add_share(self, share: TripShare):
        self._shares[share.id] = share

    def get_share(self, trip_id: str, user_id: str) -> Optional[TripShare]:
        for share in self._shares.values():
            if share.trip_id == trip_id and share.shared_with == user_id:
                return share
        return None

    def delete_share(self, share_id: str):
        self._shares.pop(share_id, None)

    def shares_for_trip(self, trip_id: str) -> list[TripShare]:
        return [s for s in self._shares.values() if s.trip_id == trip_id]

    def shares_for_user(self, user_id: str) -> list[TripShare]:
        return [s for s in self._shares.values() if s.shared_with == user_id]

    # Invitations

    def add_invitation(self, invitation: ShareInvitation):
        self._invitations[invitation.token] = invitation

    def get_invitation(self, token: str) -> Optional[ShareInvitation]:
        return self._invitations.get(token)

    def invitations_for_trip(self, trip_id: str) -> list[ShareInvitation]:
        return [i for i in self._invitations.values() if i.trip_id == trip_id]

    # Public links

    def add_public_link(self, link: PublicShareLink):
        self._public_links[link.token] = link

    def get_public_link(self, token: str) -> Optional[PublicShareLink]:
        return self._public_links.get(token)

    # Reviews

    def add_review(self, review: PlaceReview):
        self._reviews[review.id] = review

    def reviews_for_location(self, location_id: str) -> list[PlaceReview]:
        return [r for r in self._reviews.values() if r.location_id == location_id]

    def delete_reviews(self, location_ids: list[str]):
        """Drop the reviews of removed locations."""
        dropped = set(location_ids)
        self._reviews = {k: r for k, r in self._reviews.items() if r.location_id not in dropped}

    # Users

    def add_user(self, user: User):
        self._users[user.id] = user

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def find_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == email:
                return user
        return None


# Global trip store
trip_store = TripStore()
