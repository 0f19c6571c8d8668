"""
Pydantic schemas for users and their profiles.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """Registration payload"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)


class UserPublic(BaseModel):
    """Profile fields visible to other members of an organization"""
    id: int
    email: EmailStr
    display_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None

    class Config:
        from_attributes = True


class UserOut(UserPublic):
    """Full profile of the authenticated user (never includes the password hash)"""
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """PATCH /api/user/profile"""
    display_name: Optional[str] = Field(None, min_length=2, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    profile_image_url: Optional[str] = Field(None, max_length=500)

    @field_validator("display_name")
    @classmethod
    def display_name_not_null(cls, value: Optional[str]) -> str:
        # Omit the field to keep the current name; it cannot be cleared
        if value is None:
            raise ValueError("display_name cannot be null")
        return value


class UserOrganizationOut(BaseModel):
    """One entry of GET /api/user/organizations"""
    id: int
    name: str
    slug: str
    role: str
    is_owner: bool


class UserOrganizationList(BaseModel):
    organizations: List[UserOrganizationOut]
