"""
Pydantic schemas for Organization entities and their memberships.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from teamspace.core.permissions import Role
from teamspace.schemas.user import UserPublic

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class OrganizationCreate(BaseModel):
    """Schema for creating a new organization"""
    name: str = Field(..., min_length=2, max_length=100)
    slug: str = Field(..., min_length=2, max_length=100, pattern=SLUG_PATTERN)


class OrganizationUpdate(BaseModel):
    """Schema for updating an organization"""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    slug: Optional[str] = Field(None, min_length=2, max_length=100, pattern=SLUG_PATTERN)


class OrganizationOut(BaseModel):
    id: int
    name: str
    slug: str
    owner_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MembershipOut(BaseModel):
    id: int
    organization_id: int
    user_id: int
    role: Role
    created_at: datetime

    class Config:
        from_attributes = True


class MembershipWithUser(MembershipOut):
    user: UserPublic

    class Config:
        from_attributes = True


class MembershipUpdate(BaseModel):
    role: Role


class OrganizationWithMembers(OrganizationOut):
    memberships: List[MembershipWithUser] = []

    class Config:
        from_attributes = True


class OrganizationCreated(BaseModel):
    message: str
    organization: OrganizationOut


class MemberProfileOut(BaseModel):
    """GET /api/organizations/{id}/users/{user_id}"""
    user: UserPublic
    role: Role
    organization_name: str
