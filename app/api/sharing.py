"""
API Routes for trip sharing, invitations and public links.
"""
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from typing import Optional

from .deps import get_current_user_id
from .routes import MessageResponse
from ..models.sharing import (
    InvitationRequest,
    PermissionUpdate,
    PublicLinkRequest,
    PublicShareLink,
    ShareInvitation,
    ShareRequest,
    TripShare,
)
from ..models.trip import Trip
from ..services.sharing import get_sharing_manager


router = APIRouter(prefix="/api", tags=["sharing"])


class ShareLinkResponse(BaseModel):
    trip_id: str
    link: str
    qr_code_url: str


class InvitationResponse(BaseModel):
    invitation: ShareInvitation
    invitation_link: str


@router.post("/trips/{trip_id}/share", response_model=TripShare, status_code=201)
async def share_trip(trip_id: str, request: ShareRequest, user_id: str = Depends(get_current_user_id)):
    """Share a trip with another user."""
    return get_sharing_manager().share_trip(user_id, trip_id, request.user_id, request.permission)


@router.get("/trips/{trip_id}/shares", response_model=list[TripShare])
async def get_trip_shares(trip_id: str, user_id: str = Depends(get_current_user_id)):
    return get_sharing_manager().get_trip_shares(user_id, trip_id)


@router.put("/trips/{trip_id}/share/{shared_with}", response_model=TripShare)
async def update_share_permission(
    trip_id: str,
    shared_with: str,
    request: PermissionUpdate,
    user_id: str = Depends(get_current_user_id),
):
    return get_sharing_manager().update_share_permission(user_id, trip_id, shared_with, request.permission)


@router.delete("/trips/{trip_id}/share/{shared_with}", response_model=MessageResponse)
async def revoke_share(trip_id: str, shared_with: str, user_id: str = Depends(get_current_user_id)):
    get_sharing_manager().revoke_share(user_id, trip_id, shared_with)
    return MessageResponse(message=f"Revoked share for user {shared_with}")


@router.get("/trips/{trip_id}/share-link", response_model=ShareLinkResponse)
async def get_share_link(trip_id: str, user_id: str = Depends(get_current_user_id)):
    """Share link and QR code for a trip the caller can see."""
    manager = get_sharing_manager()
    manager.validator.require_access(user_id, trip_id)
    return ShareLinkResponse(
        trip_id=trip_id,
        link=manager.generate_share_link(trip_id),
        qr_code_url=manager.generate_qr_code(trip_id),
    )


# Invitations

@router.post("/trips/{trip_id}/invitations", response_model=InvitationResponse, status_code=201)
async def send_invitation(trip_id: str, request: InvitationRequest, user_id: str = Depends(get_current_user_id)):
    manager = get_sharing_manager()
    invitation = manager.send_share_invitation(user_id, trip_id, request.email, request.permission)
    return InvitationResponse(
        invitation=invitation,
        invitation_link=manager.generate_invitation_link(trip_id, invitation.token),
    )


@router.post("/invitations/{token}/accept", response_model=TripShare)
async def accept_invitation(token: str, user_id: str = Depends(get_current_user_id)):
    return get_sharing_manager().accept_share_invitation(token, user_id)


@router.post("/invitations/{token}/reject", response_model=ShareInvitation)
async def reject_invitation(token: str, user_id: str = Depends(get_current_user_id)):
    return get_sharing_manager().reject_share_invitation(token, user_id)


# Public links

@router.post("/trips/{trip_id}/public-link", response_model=PublicShareLink, status_code=201)
async def create_public_link(
    trip_id: str,
    request: Optional[PublicLinkRequest] = None,
    user_id: str = Depends(get_current_user_id),
):
    expires_in_days = request.expires_in_days if request else None
    return get_sharing_manager().generate_public_share_link(user_id, trip_id, expires_in_days)


@router.get("/shared/{trip_id}", response_model=Trip)
async def view_shared_trip(trip_id: str, token: str = Query(..., min_length=1)):
    """Read-only trip view through a public link; no login required."""
    return get_sharing_manager().resolve_public_link(trip_id, token)
