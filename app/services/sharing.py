"""
Sharing Service.
Grants, invitations, public links and permission checks for trips.
"""
import hashlib
import logging
import secrets
import time
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import quote, urlencode

from ..config import settings
from ..exceptions import (
    ErrorCode,
    InvitationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from ..models.sharing import (
    InvitationStatus,
    PublicShareLink,
    ShareInvitation,
    SharePermission,
    TripShare,
)
from ..models.store import TripStore, trip_store
from ..models.trip import Trip

logger = logging.getLogger(__name__)

QR_CODE_URL = "https://api.qrserver.com/v1/create-qr-code/"


class PermissionValidator:
    """
    Answers who may do what with a trip.

    Owners can do everything. A share grants view access, and edit access
    when its permission is ``edit``. Deleting and managing shares is owner-only.
    """

    def __init__(self, store: TripStore = None):
        self.store = store or trip_store

    def _share(self, user_id: str, trip: Trip):
        return self.store.get_share(trip.id, user_id)

    def can_access_trip(self, user_id: str, trip_id: str) -> bool:
        trip = self.store.get_trip(trip_id)
        if not trip:
            return False
        return trip.user_id == user_id or self._share(user_id, trip) is not None

    def can_edit_trip(self, user_id: str, trip_id: str) -> bool:
        trip = self.store.get_trip(trip_id)
        if not trip:
            return False
        if trip.user_id == user_id:
            return True
        share = self._share(user_id, trip)
        return share is not None and share.permission == SharePermission.EDIT

    def can_delete_trip(self, user_id: str, trip_id: str) -> bool:
        trip = self.store.get_trip(trip_id)
        return trip is not None and trip.user_id == user_id

    def can_manage_sharing(self, user_id: str, trip_id: str) -> bool:
        trip = self.store.get_trip(trip_id)
        return trip is not None and trip.user_id == user_id

    def require_access(self, user_id: str, trip_id: str) -> Trip:
        """Return the trip or raise NotFoundError (existence is not leaked)."""
        trip = self.store.get_trip(trip_id)
        if not trip or not self.can_access_trip(user_id, trip_id):
            raise NotFoundError(f"Trip {trip_id} not found")
        return trip

    def require_edit(self, user_id: str, trip_id: str) -> Trip:
        trip = self.require_access(user_id, trip_id)
        if not self.can_edit_trip(user_id, trip_id):
            raise PermissionDeniedError("You do not have permission to edit this trip")
        return trip

    def require_delete(self, user_id: str, trip_id: str) -> Trip:
        trip = self.require_access(user_id, trip_id)
        if not self.can_delete_trip(user_id, trip_id):
            raise PermissionDeniedError("Only the trip owner can delete this trip")
        return trip

    def require_manage_sharing(self, user_id: str, trip_id: str) -> Trip:
        trip = self.require_access(user_id, trip_id)
        if not self.can_manage_sharing(user_id, trip_id):
            raise PermissionDeniedError("Only the trip owner can manage sharing")
        return trip


class SharingManager:
    """Creates and revokes trip shares, invitations and public links."""

    def __init__(self, store: TripStore = None, validator: PermissionValidator = None):
        self.store = store or trip_store
        self.validator = validator or PermissionValidator(self.store)

    def generate_share_token(self, trip_id: str, subject: str) -> str:
        """Invitation token: SHA-256 hex digest over the trip, the invitee and a random nonce."""
        data = f"{trip_id}:{subject}:{time.time_ns()}:{secrets.token_hex(16)}"
        return hashlib.sha256(data.encode("utf-8")).hexdigest()

    # Direct shares

    def _grant(self, trip: Trip, shared_by: str, shared_with: str, permission: SharePermission) -> TripShare:
        """Create the share or update the permission of an existing one."""
        share = self.store.get_share(trip.id, shared_with)
        if share:
            share.permission = permission
        else:
            share = TripShare(
                trip_id=trip.id,
                shared_by=shared_by,
                shared_with=shared_with,
                permission=permission,
            )
            self.store.add_share(share)

        if shared_with not in trip.shared_with:
            trip.shared_with.append(shared_with)
        trip.touch()
        self.store.update_trip(trip)
        return share

    def share_trip(
        self,
        user_id: str,
        trip_id: str,
        target_user_id: str,
        permission: SharePermission = SharePermission.VIEW,
    ) -> TripShare:
        """Share a trip with another user directly."""
        trip = self.validator.require_manage_sharing(user_id, trip_id)
        if target_user_id == trip.user_id:
            raise ValidationFailedError("A trip cannot be shared with its owner")

        share = self._grant(trip, user_id, target_user_id, permission)
        logger.info(f"Trip {trip_id} shared with {target_user_id} ({share.permission.value})")
        return share

    def get_trip_shares(self, user_id: str, trip_id: str) -> list[TripShare]:
        self.validator.require_access(user_id, trip_id)
        return sorted(self.store.shares_for_trip(trip_id), key=lambda s: s.created_at)

    def update_share_permission(
        self,
        user_id: str,
        trip_id: str,
        shared_with_user_id: str,
        permission: SharePermission,
    ) -> TripShare:
        trip = self.validator.require_manage_sharing(user_id, trip_id)
        share = self.store.get_share(trip_id, shared_with_user_id)
        if not share:
            raise NotFoundError(f"Trip {trip_id} is not shared with {shared_with_user_id}")

        share.permission = permission
        trip.touch()
        logger.info(f"Share permission for {shared_with_user_id} on trip {trip_id} set to {permission.value}")
        return share

    def revoke_share(self, user_id: str, trip_id: str, shared_with_user_id: str):
        trip = self.validator.require_manage_sharing(user_id, trip_id)
        share = self.store.get_share(trip_id, shared_with_user_id)
        if not share:
            raise NotFoundError(f"Trip {trip_id} is not shared with {shared_with_user_id}")

        self.store.delete_share(share.id)
        if shared_with_user_id in trip.shared_with:
            trip.shared_with.remove(shared_with_user_id)
        trip.touch()
        self.store.update_trip(trip)
        logger.info(f"Revoked share for trip {trip_id} with user {shared_with_user_id}")

    # Invitations

    def send_share_invitation(
        self,
        user_id: str,
        trip_id: str,
        invited_email: str,
        permission: SharePermission = SharePermission.VIEW,
    ) -> ShareInvitation:
        """
        Issue an invitation token for an email address.

        A still-pending invitation for the same address is superseded.
        Delivery is left to the caller; the invitation link is returned
        by ``generate_invitation_link``.
        """
        trip = self.validator.require_manage_sharing(user_id, trip_id)
        invited_email = invited_email.strip()
        if "@" not in invited_email:
            raise ValidationFailedError(f"Invalid email address: {invited_email}")

        owner = self.store.get_user(trip.user_id)
        if owner and owner.email.lower() == invited_email.lower():
            raise ValidationFailedError("A trip cannot be shared with its owner")

        for previous in self.store.invitations_for_trip(trip_id):
            if (
                previous.status == InvitationStatus.PENDING
                and previous.invited_email.lower() == invited_email.lower()
            ):
                previous.status = InvitationStatus.REJECTED

        invitation = ShareInvitation(
            trip_id=trip_id,
            invited_email=invited_email,
            invited_by=user_id,
            permission=permission,
            token=self.generate_share_token(trip_id, invited_email),
            expires_at=datetime.now() + timedelta(days=settings.invitation_ttl_days),
        )
        self.store.add_invitation(invitation)
        logger.info(f"Share invitation {invitation.id} created for trip {trip_id} ({invited_email})")
        return invitation

    def _pending_invitation(self, token: str) -> ShareInvitation:
        invitation = self.store.get_invitation(token)
        if not invitation:
            raise InvitationError("Invitation not found")
        if invitation.status != InvitationStatus.PENDING:
            raise InvitationError(f"Invitation is already {invitation.status.value}")
        if invitation.is_expired():
            invitation.status = InvitationStatus.EXPIRED
            raise InvitationError("Invitation has expired", code=ErrorCode.INVITATION_EXPIRED)
        return invitation

    def _check_invitee(self, invitation: ShareInvitation, user_id: str):
        user = self.store.get_user(user_id)
        if user and user.email.lower() != invitation.invited_email.lower():
            raise InvitationError("Invitation is for a different user")

    def accept_share_invitation(self, token: str, user_id: str) -> TripShare:
        """Redeem an invitation token and grant the invited permission."""
        invitation = self._pending_invitation(token)
        trip = self.store.get_trip(invitation.trip_id)
        if not trip:
            raise NotFoundError(f"Trip {invitation.trip_id} not found")
        if trip.user_id == user_id:
            raise InvitationError("The trip owner cannot accept an invitation to their own trip")
        self._check_invitee(invitation, user_id)

        share = self._grant(trip, invitation.invited_by, user_id, invitation.permission)
        invitation.status = InvitationStatus.ACCEPTED
        logger.info(f"Invitation {invitation.id} accepted by {user_id}")
        return share

    def reject_share_invitation(self, token: str, user_id: str) -> ShareInvitation:
        invitation = self._pending_invitation(token)
        self._check_invitee(invitation, user_id)
        invitation.status = InvitationStatus.REJECTED
        logger.info(f"Invitation {invitation.id} rejected by {user_id}")
        return invitation

    # Links

    def generate_public_share_link(
        self,
        user_id: str,
        trip_id: str,
        expires_in_days: Optional[int] = None,
    ) -> PublicShareLink:
        """Issue a link that shows the trip read-only without logging in."""
        self.validator.require_manage_sharing(user_id, trip_id)
        days = settings.public_link_ttl_days if expires_in_days is None else expires_in_days
        if days < 1:
            raise ValidationFailedError("A public link must stay valid for at least one day")
        token = secrets.token_hex(32)
        public_link = PublicShareLink(
            trip_id=trip_id,
            token=token,
            link=f"{settings.app_url}/shared/{trip_id}?token={token}",
            expires_at=datetime.now() + timedelta(days=days),
        )
        self.store.add_public_link(public_link)
        logger.info(f"Public link issued for trip {trip_id}, expires {public_link.expires_at.isoformat()}")
        return public_link

    def resolve_public_link(self, trip_id: str, token: str) -> Trip:
        public_link = self.store.get_public_link(token)
        if not public_link or public_link.trip_id != trip_id:
            raise NotFoundError("Shared trip not found")
        if public_link.is_expired():
            raise PermissionDeniedError("This share link has expired")

        trip = self.store.get_trip(trip_id)
        if not trip:
            raise NotFoundError("Shared trip not found")
        return trip

    def generate_share_link(self, trip_id: str, token: str = None) -> str:
        query = {"trip": trip_id}
        if token:
            query["token"] = token
        return f"{settings.app_url}/shared?{urlencode(query)}"

    def generate_invitation_link(self, trip_id: str, token: str) -> str:
        return f"{settings.app_url}/invite?{urlencode({'trip': trip_id, 'token': token})}"

    def generate_qr_code(self, trip_id: str) -> str:
        """URL of a QR code image encoding the trip's share link."""
        share_link = self.generate_share_link(trip_id)
        return f"{QR_CODE_URL}?size=200x200&data={quote(share_link, safe='')}"


# Global instances
permission_validator = None
sharing_manager = None


def get_permission_validator() -> PermissionValidator:
    """Get or create the global permission validator."""
    global permission_validator
    if permission_validator is None:
        permission_validator = PermissionValidator()
    return permission_validator


def get_sharing_manager() -> SharingManager:
    """Get or create the global sharing manager."""
    global sharing_manager
    if sharing_manager is None:
        sharing_manager = SharingManager(validator=get_permission_validator())
    return sharing_manager
