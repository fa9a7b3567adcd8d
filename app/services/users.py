"""
User Service.
Minimal user registry used to match invitation emails.
"""
import logging
from typing import Optional

from pydantic import ValidationError

from ..exceptions import NotFoundError, ValidationFailedError
from ..models.store import TripStore, trip_store
from ..models.trip import User

logger = logging.getLogger(__name__)


class UserService:
    """Registers and looks up users."""

    def __init__(self, store: TripStore = None):
        self.store = store or trip_store

    def register(self, email: str, name: str, avatar: Optional[str] = None) -> User:
        if self.store.find_user_by_email(email):
            raise ValidationFailedError(f"Email {email} is already registered")
        try:
            user = User(email=email, name=name, avatar=avatar)
        except ValidationError as e:
            raise ValidationFailedError(str(e)) from e
        self.store.add_user(user)
        logger.info(f"User {user.id} registered")
        return user

    def get_user(self, user_id: str) -> User:
        user = self.store.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user


# Global user service
user_service = None


def get_user_service() -> UserService:
    """Get or create the global user service."""
    global user_service
    if user_service is None:
        user_service = UserService()
    return user_service
