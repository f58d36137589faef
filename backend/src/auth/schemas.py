"""Pydantic schemas for authentication endpoints"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from domain.tenancy.models import OrganizationType, UserRole


class SignupRequest(BaseModel):
    """Request schema for user registration.

    A new user either creates a company (and becomes its ADMIN) or joins an
    existing one by join code (as USER).
    """
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=256)
    confirm_password: str
    company_mode: Literal["create", "join"]
    company_name: Optional[str] = Field(None, max_length=100)
    join_code: Optional[str] = Field(None, max_length=32)

    @model_validator(mode="after")
    def check_company_fields(self) -> "SignupRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        if self.company_mode == "create" and not (self.company_name or "").strip():
            raise ValueError("Company name is required")
        if self.company_mode == "join" and not (self.join_code or "").strip():
            raise ValueError("Join code is required")
        return self


class LoginRequest(BaseModel):
    """Request schema for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Response schema for a successful login or signup.

    Attributes:
        access_token: JWT access token
        token_type: Token type (always "bearer")
        expires_in: Token expiry in seconds
    """
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 3600


class CompanySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    join_code: str
    organization_type: OrganizationType
    parent_company_id: Optional[UUID] = None


class UserResponse(BaseModel):
    """User information response (excludes password_hash)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: Optional[UUID]
    email: str
    name: str
    role: UserRole
    status: str
    last_login_at: Optional[datetime]
    created_at: datetime


class MeResponse(BaseModel):
    """Response schema for GET /auth/me.

    company is null while the user has not created or joined a company.
    """
    user: UserResponse
    company: Optional[CompanySummary] = None


class SignupResponse(LoginResponse):
    user: UserResponse
    company: CompanySummary
