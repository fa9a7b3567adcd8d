"""
Sharing models - Trip shares, invitations and public links.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum
import uuid


class SharePermission(str, Enum):
    """What a share grants on a trip."""
    VIEW = "view"
    EDIT = "edit"


class InvitationStatus(str, Enum):
    """Lifecycle of a share invitation."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class TripShare(BaseModel):
    """A grant of view/edit permission on a trip to another user."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    trip_id: str
    shared_by: str = Field(..., description="User who granted the share")
    shared_with: str = Field(..., description="User who received the share")
    permission: SharePermission = SharePermission.VIEW
    created_at: datetime = Field(default_factory=datetime.now)


class ShareInvitation(BaseModel):
    """An emailed invitation to join a trip, redeemed with its token."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    trip_id: str
    invited_email: str
    invited_by: str
    permission: SharePermission = SharePermission.VIEW
    token: str
    expires_at: datetime
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.now)

    def is_expired(self, now: datetime = None) -> bool:
        return (now or datetime.now()) >= self.expires_at


class PublicShareLink(BaseModel):
    """Read-only link that opens a trip without logging in."""
    trip_id: str
    token: str
    link: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=datetime.now)

    def is_expired(self, now: datetime = None) -> bool:
        return (now or datetime.now()) >= self.expires_at


# Request payloads

class ShareRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    permission: SharePermission = SharePermission.VIEW


class PermissionUpdate(BaseModel):
    permission: SharePermission


class InvitationRequest(BaseModel):
    email: str = Field(..., min_length=3)
    permission: SharePermission = SharePermission.VIEW


class PublicLinkRequest(BaseModel):
    expires_in_days: Optional[int] = Field(None, ge=1, le=365)
