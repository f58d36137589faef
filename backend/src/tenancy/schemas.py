"""Pydantic schemas for company, membership and organization tree endpoints."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.tenancy.models import OrganizationType, UserRole


class CompanyResponse(BaseModel):
    """A company as shown to its members."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    join_code: str
    organization_type: OrganizationType
    parent_company_id: Optional[UUID] = None
    location: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class CompanyCreateRequest(BaseModel):
    """POST /company/create"""
    name: str = Field(..., min_length=1, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)


class JoinCodeRequest(BaseModel):
    """POST /company/join and POST /company/switch.

    Normalization (trim, upper-case) and format checks happen in the tenancy
    core so every entry point applies the same rules.
    """
    join_code: str = Field(..., min_length=1, max_length=32)


class AffiliationResponse(BaseModel):
    """Result of a tenant boundary transition, with a refreshed token."""
    company: CompanyResponse
    role: UserRole
    access_token: str
    token_type: str = "bearer"
    message: str


class VisibleCompanyResponse(CompanyResponse):
    is_current: bool


class UserCompaniesResponse(BaseModel):
    """GET /user/companies"""
    companies: List[VisibleCompanyResponse]
    current_company_id: Optional[UUID]


class ChildCompanyRequest(BaseModel):
    """POST /admin/child-company"""
    name: str = Field(..., min_length=1, max_length=100)
    organization_type: str = Field(..., description="SUBSIDIARY, BRANCH, LOCATION or DIVISION")
    location: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)


class CompanyTreeNodeResponse(BaseModel):
    id: UUID
    name: str
    join_code: str
    organization_type: OrganizationType
    parent_company_id: Optional[UUID] = None
    location: Optional[str] = None
    description: Optional[str] = None
    user_count: int
    descendant_count: int
    children: List["CompanyTreeNodeResponse"] = []


class OrganizationTreeResponse(BaseModel):
    """GET /admin/organization-tree"""
    tree: CompanyTreeNodeResponse
    truncated: bool
    current_company_id: UUID
    user_role: UserRole


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None


class CompanyProfileResponse(BaseModel):
    """GET /admin/company"""
    company: CompanyResponse
    users: List[MemberResponse]
    user_count: int
    child_count: int


class CompanyUpdateRequest(BaseModel):
    """PATCH /admin/company"""
    name: str = Field(..., min_length=1, max_length=100)


CompanyTreeNodeResponse.model_rebuild()
