"""
Invitation lifecycle: create -> email -> accept / cancel / expire.

States are Pending (row exists), Accepted and Cancelled (row deleted) and
Expired (row exists with `expires` in the past). Expiry is checked when an
invitation is listed or accepted, and expired rows are purged periodically
by the Celery beat task in teamspace.mycelery.worker.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teamspace.core.config import settings
from teamspace.core.errors import DuplicateInvitation, InvalidToken, InvitationExpired, NotFound
from teamspace.core.permissions import Role
from teamspace.core.security import generate_invitation_token
from teamspace.logging import get_logger
from teamspace.models.invitation import Invitation
from teamspace.models.membership import Membership
from teamspace.models.organization import Organization
from teamspace.models.user import User
from teamspace.services.authorization import authorize, get_membership
from teamspace.services.memberships import load_organization_with_members
from teamspace.services.notifications import NotificationSender, send_invitation_email

logger = get_logger("invitations")

EMAIL_FAILED_WARNING = "Invitation created, but the invitation email could not be sent"


@dataclass
class AcceptResult:
    organization: Organization
    membership: Membership
    user: User
    already_member: bool


async def get_invitation_by_token(db: AsyncSession, token: str) -> Invitation:
    result = await db.execute(
        select(Invitation)
        .options(selectinload(Invitation.organization))
        .filter(Invitation.token == token)
    )
    invitation = result.scalar_one_or_none()
    if not invitation:
        raise InvalidToken()
    return invitation


async def create_invitation(
    db: AsyncSession,
    sender: NotificationSender,
    user: User,
    organization_id: int,
    email: str,
    role: Role,
) -> Tuple[Invitation, bool]:
    """
    Create a pending invitation and try to email it.

    Only admins of the organization may invite. Returns the stored
    invitation and whether the email was delivered; a delivery failure
    does not undo the invitation.

    Raises:
        DuplicateInvitation: the email already belongs to a member, or an
            unexpired invitation exists for the same email and organization
    """
    context = await authorize(db, user, organization_id, required_role=Role.ADMIN)
    organization = context.organization
    email = email.lower()

    existing_member = await db.execute(
        select(Membership)
        .join(User, User.id == Membership.user_id)
        .filter(
            Membership.organization_id == organization_id,
            User.email == email,
        )
    )
    if existing_member.scalar_one_or_none():
        raise DuplicateInvitation("This user is already a member of the organization")

    existing = await db.execute(
        select(Invitation).filter(
            Invitation.organization_id == organization_id,
            Invitation.email == email,
        )
    )
    existing_invitation = existing.scalar_one_or_none()
    if existing_invitation:
        if not existing_invitation.is_expired():
            raise DuplicateInvitation()
        # An expired invitation is replaced by the new one
        await db.delete(existing_invitation)
        await db.flush()

    invitation = Invitation(
        email=email,
        role=Role(role).value,
        token=generate_invitation_token(),
        expires=datetime.now(timezone.utc) + timedelta(days=settings.INVITATION_TTL_DAYS),
        organization_id=organization_id,
        invited_by_id=user.id,
    )
    db.add(invitation)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateInvitation()
    await db.refresh(invitation)

    logger.info(
        "Invitation created",
        invitation_id=invitation.id,
        organization_id=organization_id,
        invited_by=user.id,
    )

    email_sent = await send_invitation_email(
        sender,
        email=invitation.email,
        organization_name=organization.name,
        token=invitation.token,
    )
    return invitation, email_sent


async def list_invitations(
    db: AsyncSession,
    user: User,
    organization_id: int,
    include_expired: bool = False,
) -> List[Invitation]:
    """Pending invitations of an organization, newest first (admins only)."""
    await authorize(db, user, organization_id, required_role=Role.ADMIN)

    query = select(Invitation).filter(Invitation.organization_id == organization_id)
    if not include_expired:
        query = query.filter(Invitation.expires > datetime.now(timezone.utc))
    query = query.order_by(Invitation.created_at.desc(), Invitation.id.desc())

    result = await db.execute(query)
    return list(result.scalars().all())


async def cancel_invitation(db: AsyncSession, user: User, invitation_id: int) -> None:
    """Delete a pending invitation. The caller must be an admin of its organization."""
    result = await db.execute(select(Invitation).filter(Invitation.id == invitation_id))
    invitation = result.scalar_one_or_none()
    if not invitation:
        raise NotFound("Invitation not found")

    await authorize(db, user, invitation.organization_id, required_role=Role.ADMIN)

    await db.delete(invitation)
    await db.commit()
    logger.info("Invitation cancelled", invitation_id=invitation_id, cancelled_by=user.id)


async def accept_invitation(db: AsyncSession, user: User, token: str) -> AcceptResult:
    """
    Join the invitation's organization with the invitation's role.

    The membership insert and the invitation delete are committed together.
    When the user is already a member the invitation is discarded and the
    existing membership is returned.

    Raises:
        InvalidToken: no invitation with this token
        InvitationExpired: the invitation is past its expiry
    """
    invitation = await get_invitation_by_token(db, token)

    if invitation.is_expired():
        raise InvitationExpired()

    organization_id = invitation.organization_id

    membership = await get_membership(db, user.id, organization_id)
    if membership:
        await db.delete(invitation)
        await db.commit()
        logger.info("Invitation discarded, user already a member", user_id=user.id, organization_id=organization_id)
        return AcceptResult(
            organization=await load_organization_with_members(db, organization_id),
            membership=membership,
            user=user,
            already_member=True,
        )

    membership = Membership(
        user_id=user.id,
        organization_id=organization_id,
        role=invitation.role,
    )
    user_id = user.id
    db.add(membership)
    await db.delete(invitation)
    try:
        await db.commit()
    except IntegrityError:
        # Concurrent accept created the membership first; rollback expires `user`
        await db.rollback()
        await db.refresh(user)
        membership = await get_membership(db, user_id, organization_id)
        if not membership:
            raise
        await db.execute(
            delete(Invitation)
            .where(Invitation.token == token)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return AcceptResult(
            organization=await load_organization_with_members(db, organization_id),
            membership=membership,
            user=user,
            already_member=True,
        )

    await db.refresh(membership)
    logger.great("User joined organization", user_id=user.id, organization_id=organization_id, role=membership.role)

    return AcceptResult(
        organization=await load_organization_with_members(db, organization_id),
        membership=membership,
        user=user,
        already_member=False,
    )


async def purge_expired_invitations(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Delete every invitation whose expiry has passed. Returns the number of rows removed."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        delete(Invitation)
        .where(Invitation.expires < now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    removed = result.rowcount or 0
    if removed:
        logger.info("Expired invitations purged", count=removed)
    return removed
