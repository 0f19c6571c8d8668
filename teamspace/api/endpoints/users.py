"""
Current user endpoints: organizations the user belongs to and profile.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from teamspace.api.dependencies import get_current_user, get_db
from teamspace.logging import get_logger
from teamspace.models.membership import Membership
from teamspace.models.organization import Organization
from teamspace.models.user import User
from teamspace.schemas.user import ProfileUpdate, UserOrganizationList, UserOut

router = APIRouter()
logger = get_logger("users")


@router.get("/organizations", response_model=UserOrganizationList)
async def list_my_organizations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Organizations the current user belongs to, with their role, newest membership first."""
    result = await db.execute(
        select(Organization, Membership.role)
        .join(Membership, Membership.organization_id == Organization.id)
        .filter(Membership.user_id == current_user.id)
        .order_by(Membership.created_at.desc(), Membership.id.desc())
    )
    organizations = [
        {
            "id": organization.id,
            "name": organization.name,
            "slug": organization.slug,
            "role": role,
            "is_owner": organization.owner_id == current_user.id,
        }
        for organization, role in result.all()
    ]
    return {"organizations": organizations}


@router.get("/profile", response_model=UserOut)
async def read_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/profile", response_model=UserOut)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    update_data = profile_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(current_user, field, value)

    await db.commit()
    await db.refresh(current_user)

    logger.info("Profile updated", user_id=current_user.id, fields=",".join(update_data))
    return current_user
