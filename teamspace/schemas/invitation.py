"""
Pydantic schemas for invitations.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

from teamspace.core.permissions import Role
from teamspace.schemas.organization import MembershipOut, OrganizationWithMembers
from teamspace.schemas.user import UserPublic


class InvitationBase(BaseModel):
    email: EmailStr
    role: Role = Role.MEMBER


class InvitationCreate(InvitationBase):
    """POST /api/organizations/{id}/invitations"""


class InvitationCreateWithOrganization(InvitationBase):
    """POST /api/invitations"""
    organization_id: int = Field(..., gt=0)


class InvitationOut(InvitationBase):
    id: int
    organization_id: int
    token: str
    expires: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class InvitationCreated(BaseModel):
    message: str
    invitation: InvitationOut
    email_sent: bool
    warning: Optional[str] = None


class InvitationList(BaseModel):
    invitations: List[InvitationOut]


class InvitationPreview(BaseModel):
    """Public view of an invitation, shown before the invitee signs in"""
    organization_name: str
    email: EmailStr
    role: Role
    expires: datetime
    expired: bool


class AcceptInvitation(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)


class AcceptInvitationOut(BaseModel):
    message: str
    organization: OrganizationWithMembers
    membership: MembershipOut
    user: UserPublic
