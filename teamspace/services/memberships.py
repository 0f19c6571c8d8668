"""
Membership management inside an organization: removal and role changes.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teamspace.core.errors import BadRequest, Forbidden, NotFound
from teamspace.core.permissions import Role
from teamspace.logging import get_logger
from teamspace.models.membership import Membership
from teamspace.models.organization import Organization
from teamspace.models.user import User
from teamspace.services.authorization import authorize

logger = get_logger("memberships")


async def load_organization_with_members(db: AsyncSession, organization_id: int) -> Organization:
    """Organization with its memberships and their users eagerly loaded."""
    result = await db.execute(
        select(Organization)
        .options(selectinload(Organization.memberships).selectinload(Membership.user))
        .filter(Organization.id == organization_id)
        .execution_options(populate_existing=True)
    )
    organization = result.scalar_one_or_none()
    if not organization:
        raise NotFound("Organization not found")
    return organization


async def _get_target_membership(db: AsyncSession, organization_id: int, member_id: int) -> Membership:
    result = await db.execute(
        select(Membership)
        .options(selectinload(Membership.user))
        .filter(
            Membership.id == member_id,
            Membership.organization_id == organization_id,
        )
    )
    membership = result.scalar_one_or_none()
    if not membership:
        raise NotFound("Member not found")
    return membership


async def remove_member(db: AsyncSession, user: User, organization_id: int, member_id: int) -> None:
    """
    Remove membership `member_id` from the organization.

    Raises:
        NotFound: organization, or membership within it, does not exist
        NotAMember / InsufficientRole: caller is not an admin
        Forbidden: target is the organization owner, including the owner themselves
        BadRequest: caller tries to remove their own membership
    """
    context = await authorize(db, user, organization_id, required_role=Role.ADMIN)
    target = await _get_target_membership(db, organization_id, member_id)

    if target.user_id == context.organization.owner_id:
        raise Forbidden("The organization owner cannot be removed")

    if target.user_id == user.id:
        raise BadRequest("You cannot remove yourself from the organization")

    await db.delete(target)
    await db.commit()
    logger.info(
        "Member removed",
        organization_id=organization_id,
        user_id=target.user_id,
        removed_by=user.id,
    )


async def update_member_role(
    db: AsyncSession, user: User, organization_id: int, member_id: int, role: Role
) -> Membership:
    """Change the role of a member. Admins only; the owner's and the caller's own rows are locked."""
    context = await authorize(db, user, organization_id, required_role=Role.ADMIN)
    target = await _get_target_membership(db, organization_id, member_id)

    if target.user_id == context.organization.owner_id:
        raise Forbidden("The organization owner's role cannot be changed")

    if target.user_id == user.id:
        raise BadRequest("You cannot change your own role")

    target.role = Role(role).value
    await db.commit()
    await db.refresh(target, attribute_names=["role"])
    logger.info(
        "Member role changed",
        organization_id=organization_id,
        user_id=target.user_id,
        role=target.role,
        changed_by=user.id,
    )
    return target


async def list_members(db: AsyncSession, organization_id: int) -> List[Membership]:
    result = await db.execute(
        select(Membership)
        .options(selectinload(Membership.user))
        .filter(Membership.organization_id == organization_id)
        .order_by(Membership.created_at.asc(), Membership.id.asc())
    )
    return list(result.scalars().all())
