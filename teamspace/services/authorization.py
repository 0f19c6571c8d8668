"""
Organization-scoped authorization guard.

Every organization-scoped mutation or sensitive read goes through
`authorize`, which resolves the caller's membership and enforces role and
ownership requirements.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.core.errors import InsufficientRole, NotAMember, NotFound, OwnerRequired
from teamspace.core.permissions import Role, role_satisfies
from teamspace.models.membership import Membership
from teamspace.models.organization import Organization
from teamspace.models.user import User


@dataclass
class MembershipContext:
    """Result of a successful authorization check."""
    user: User
    organization: Organization
    membership: Optional[Membership]
    role: Role
    is_owner: bool

    @property
    def organization_id(self) -> int:
        return self.organization.id


async def get_membership(
    db: AsyncSession, user_id: int, organization_id: int
) -> Optional[Membership]:
    result = await db.execute(
        select(Membership).filter(
            Membership.organization_id == organization_id,
            Membership.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def authorize(
    db: AsyncSession,
    user: User,
    organization_id: int,
    required_role: Optional[Role] = None,
    owner_only: bool = False,
) -> MembershipContext:
    """
    Check that `user` may act on organization `organization_id`.

    The owner is treated as ADMIN even when their membership row is missing
    or holds a lower role.

    Raises:
        NotFound: organization does not exist
        NotAMember: caller has no membership and is not the owner
        InsufficientRole: caller's role is below `required_role`
        OwnerRequired: `owner_only` and caller is not the owner
    """
    result = await db.execute(
        select(Organization).filter(Organization.id == organization_id)
    )
    organization = result.scalar_one_or_none()
    if not organization:
        raise NotFound("Organization not found")

    membership = await get_membership(db, user.id, organization_id)
    is_owner = organization.owner_id == user.id

    if is_owner:
        role = Role.ADMIN
    elif membership:
        role = Role(membership.role)
    else:
        raise NotAMember()

    if required_role and not role_satisfies(role, required_role):
        raise InsufficientRole()

    if owner_only and not is_owner:
        raise OwnerRequired()

    return MembershipContext(
        user=user,
        organization=organization,
        membership=membership,
        role=role,
        is_owner=is_owner,
    )
