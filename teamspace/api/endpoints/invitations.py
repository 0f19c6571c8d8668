"""
Invitations API Endpoints

Create, list and cancel invitations (admins of the organization), preview
an invitation by token (public) and accept it (authenticated invitee).
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.api.dependencies import get_current_user, get_db, get_notification_sender
from teamspace.models.user import User
from teamspace.schemas.invitation import (
    AcceptInvitation,
    AcceptInvitationOut,
    InvitationCreateWithOrganization,
    InvitationCreated,
    InvitationList,
    InvitationPreview,
)
from teamspace.services import invitations as invitation_service
from teamspace.services.notifications import NotificationSender

router = APIRouter()


@router.post("/", response_model=InvitationCreated, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    invitation_data: InvitationCreateWithOrganization,
    current_user: User = Depends(get_current_user),
    sender: NotificationSender = Depends(get_notification_sender),
    db: AsyncSession = Depends(get_db)
):
    """
    Invite an email address to an organization.

    The invitation is stored even when the email cannot be delivered;
    in that case `email_sent` is false and `warning` explains why.
    """
    invitation, email_sent = await invitation_service.create_invitation(
        db,
        sender,
        current_user,
        invitation_data.organization_id,
        email=invitation_data.email,
        role=invitation_data.role,
    )
    return {
        "message": "Invitation created successfully",
        "invitation": invitation,
        "email_sent": email_sent,
        "warning": None if email_sent else invitation_service.EMAIL_FAILED_WARNING,
    }


@router.get("/", response_model=InvitationList)
async def list_invitations(
    organization_id: int = Query(..., gt=0),
    include_expired: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    invitations = await invitation_service.list_invitations(
        db, current_user, organization_id, include_expired=include_expired
    )
    return {"invitations": invitations}


@router.get("/token/{token}", response_model=InvitationPreview)
async def preview_invitation(token: str, db: AsyncSession = Depends(get_db)):
    """Public summary of an invitation, shown on the accept page before sign-in."""
    invitation = await invitation_service.get_invitation_by_token(db, token)
    return {
        "organization_name": invitation.organization.name,
        "email": invitation.email,
        "role": invitation.role,
        "expires": invitation.expires,
        "expired": invitation.is_expired(),
    }


@router.post("/accept", response_model=AcceptInvitationOut)
async def accept_invitation(
    payload: AcceptInvitation,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await invitation_service.accept_invitation(db, current_user, payload.token)
    message = (
        "You are already a member of this organization"
        if result.already_member
        else "Invitation accepted successfully"
    )
    return {
        "message": message,
        "organization": result.organization,
        "membership": result.membership,
        "user": result.user,
    }


@router.delete("/{invitation_id}")
async def cancel_invitation(
    invitation_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await invitation_service.cancel_invitation(db, current_user, invitation_id)
    return {"message": "Invitation cancelled successfully"}
