"""Pydantic schemas for member administration endpoints.

All schemas exclude password_hash for security (never return in API responses).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from domain.tenancy.models import UserRole


class UserRoleUpdate(BaseModel):
    """Request schema for PATCH /admin/users/{user_id}."""
    role: UserRole = Field(
        ...,
        description="New role inside the admin's company",
        examples=["ADMIN"]
    )


class UserInvite(BaseModel):
    """Request schema for POST /admin/users/invite."""
    email: EmailStr = Field(
        ...,
        description="Address of the person to invite",
        examples=["new.hire@acme.example"]
    )


class MemberResponse(BaseModel):
    """A member of the admin's company."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    role: UserRole
    company_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


class MemberChangeResponse(BaseModel):
    message: str
    user: MemberResponse


class InviteResponse(BaseModel):
    """Join code and instructions to pass on; no e-mail is sent."""
    message: str
    email: str
    join_code: str
    company_name: str
    instructions: str
