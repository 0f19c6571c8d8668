"""
Organizations API Endpoints

CRUD for organizations, management of their members and the
organization-scoped invitation surface.
"""

from typing import List
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from teamspace.api.dependencies import get_current_user, get_db, get_notification_sender, require_permission
from teamspace.core.errors import Conflict, NotFound
from teamspace.core.permissions import Action, Resource, Role
from teamspace.logging import get_logger
from teamspace.models.membership import Membership
from teamspace.models.organization import Organization
from teamspace.models.user import User
from teamspace.schemas.invitation import InvitationCreate, InvitationCreated, InvitationList
from teamspace.schemas.organization import (
    MemberProfileOut,
    MembershipUpdate,
    MembershipWithUser,
    OrganizationCreate,
    OrganizationCreated,
    OrganizationOut,
    OrganizationUpdate,
    OrganizationWithMembers,
)
from teamspace.services import invitations as invitation_service
from teamspace.services import memberships as membership_service
from teamspace.services.authorization import MembershipContext, authorize, get_membership
from teamspace.services.notifications import NotificationSender

router = APIRouter()
logger = get_logger("organizations")


async def _ensure_slug_available(db: AsyncSession, slug: str, organization_id: int = None) -> None:
    query = select(Organization).filter(Organization.slug == slug)
    if organization_id is not None:
        query = query.filter(Organization.id != organization_id)
    result = await db.execute(query)
    if result.scalar_one_or_none():
        raise Conflict("Slug is already taken")


# ==================== Organization CRUD ====================

@router.post("/", response_model=OrganizationCreated, status_code=status.HTTP_201_CREATED)
async def create_organization(
    org_data: OrganizationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new organization.

    The creator becomes its owner and is added as an ADMIN member in the
    same transaction.
    """
    await _ensure_slug_available(db, org_data.slug)

    new_org = Organization(
        name=org_data.name,
        slug=org_data.slug,
        owner_id=current_user.id,
    )
    db.add(new_org)
    await db.flush()  # Get org.id

    db.add(Membership(
        organization_id=new_org.id,
        user_id=current_user.id,
        role=Role.ADMIN.value,
    ))

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Slug is already taken")
    await db.refresh(new_org)

    logger.great("Organization created", organization_id=new_org.id, owner_id=current_user.id)
    return {"message": "Organization created successfully", "organization": new_org}


@router.get("/{organization_id}", response_model=OrganizationWithMembers)
async def get_organization(
    organization_id: int,
    context: MembershipContext = Depends(require_permission(Resource.ORGANIZATION, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    """Organization details with members. Any member may read."""
    return await membership_service.load_organization_with_members(db, organization_id)


@router.patch("/{organization_id}", response_model=OrganizationOut)
async def update_organization(
    organization_id: int,
    org_data: OrganizationUpdate,
    context: MembershipContext = Depends(require_permission(Resource.ORGANIZATION, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """Rename an organization or change its slug. Admins only."""
    organization = context.organization
    update_data = org_data.model_dump(exclude_unset=True, exclude_none=True)

    if "slug" in update_data and update_data["slug"] != organization.slug:
        await _ensure_slug_available(db, update_data["slug"], organization_id)

    for field, value in update_data.items():
        setattr(organization, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Slug is already taken")
    await db.refresh(organization)

    logger.info("Organization updated", organization_id=organization_id, fields=",".join(update_data))
    return organization


@router.delete("/{organization_id}")
async def delete_organization(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete an organization with its memberships and invitations.

    Only the owner can delete; other admins receive 403.
    """
    context = await authorize(db, current_user, organization_id, owner_only=True)

    await db.delete(context.organization)
    await db.commit()

    logger.info("Organization deleted", organization_id=organization_id, deleted_by=current_user.id)
    return {"message": "Organization deleted successfully"}


# ==================== Organization Members ====================

@router.get("/{organization_id}/members", response_model=List[MembershipWithUser])
async def list_organization_members(
    organization_id: int,
    context: MembershipContext = Depends(require_permission(Resource.MEMBERSHIP, Action.LIST)),
    db: AsyncSession = Depends(get_db)
):
    return await membership_service.list_members(db, organization_id)


@router.patch("/{organization_id}/members/{member_id}", response_model=MembershipWithUser)
async def update_organization_member(
    organization_id: int,
    member_id: int,
    member_data: MembershipUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change a member's role (admins only)."""
    return await membership_service.update_member_role(
        db, current_user, organization_id, member_id, member_data.role
    )


@router.delete("/{organization_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_organization_member(
    organization_id: int,
    member_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Remove a member from the organization.

    Admins cannot remove themselves (400) and nobody can remove the owner (403).
    """
    await membership_service.remove_member(db, current_user, organization_id, member_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{organization_id}/users/{user_id}", response_model=MemberProfileOut)
async def get_member_profile(
    organization_id: int,
    user_id: int,
    context: MembershipContext = Depends(require_permission(Resource.MEMBERSHIP, Action.READ)),
    db: AsyncSession = Depends(get_db)
):
    """Profile of another member, with their role in this organization."""
    organization = context.organization
    result = await db.execute(select(User).filter(User.id == user_id))
    target = result.scalar_one_or_none()

    membership = await get_membership(db, user_id, organization_id) if target else None
    if target and target.id == organization.owner_id:
        role = Role.ADMIN
    elif membership:
        role = Role(membership.role)
    else:
        raise NotFound("User is not a member of this organization")

    return {"user": target, "role": role, "organization_name": organization.name}


# ==================== Organization Invitations ====================

@router.post(
    "/{organization_id}/invitations",
    response_model=InvitationCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_organization_invitation(
    organization_id: int,
    invitation_data: InvitationCreate,
    current_user: User = Depends(get_current_user),
    sender: NotificationSender = Depends(get_notification_sender),
    db: AsyncSession = Depends(get_db)
):
    invitation, email_sent = await invitation_service.create_invitation(
        db,
        sender,
        current_user,
        organization_id,
        email=invitation_data.email,
        role=invitation_data.role,
    )
    return {
        "message": "Invitation created successfully",
        "invitation": invitation,
        "email_sent": email_sent,
        "warning": None if email_sent else invitation_service.EMAIL_FAILED_WARNING,
    }


@router.get("/{organization_id}/invitations", response_model=InvitationList)
async def list_organization_invitations(
    organization_id: int,
    include_expired: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    invitations = await invitation_service.list_invitations(
        db, current_user, organization_id, include_expired=include_expired
    )
    return {"invitations": invitations}
