"""FastAPI router for company affiliation and organization hierarchy.

This module provides endpoints for:
- POST /company/create - Create a root company, caller becomes ADMIN
- POST /company/join - Join a company by join code as USER
- POST /company/switch - Move the caller's active company
- GET /user/companies - Companies the caller may see or select
- GET /admin/organization-tree - Whole tree around the caller's company (ADMIN)
- POST /admin/child-company - Child under the caller's company (ADMIN)
- GET/PATCH /admin/company - Company profile and rename (ADMIN)

Handlers resolve the caller, call one tenancy service, then commit once.
Domain errors propagate to the exception handlers in main.py.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from auth.dependencies import CurrentAdmin, CurrentUser
from auth.jwt import create_access_token
from database import get_db
from dependencies import TenancyServices, get_tenancy_services
from domain.tenancy.models import Affiliation
from .schemas import (
    AffiliationResponse,
    ChildCompanyRequest,
    CompanyCreateRequest,
    CompanyProfileResponse,
    CompanyResponse,
    CompanyUpdateRequest,
    JoinCodeRequest,
    MemberResponse,
    OrganizationTreeResponse,
    UserCompaniesResponse,
    VisibleCompanyResponse,
)


router = APIRouter(tags=["Tenancy"])


def _affiliation_response(affiliation: Affiliation, message: str) -> AffiliationResponse:
    user = affiliation.user
    return AffiliationResponse(
        company=CompanyResponse.model_validate(affiliation.company),
        role=user.role,
        access_token=create_access_token(
            user_id=user.id,
            company_id=user.company_id,
            role=user.role.value,
            email=user.email,
        ),
        message=message,
    )


@router.post("/company/create", response_model=AffiliationResponse, status_code=status.HTTP_201_CREATED)
def create_company(
    data: CompanyCreateRequest,
    current_user: CurrentUser,
    db: Session = Depends(get_db),
    services: TenancyServices = Depends(get_tenancy_services),
) -> AffiliationResponse:
    """Create a root company with a fresh join code; the caller becomes its ADMIN.

    Raises 409 if the caller already belongs to a company.
    """
    affiliation = services.boundary.create_company(
        current_user.id,
        name=data.name,
        location=data.location,
        description=data.description,
    )
    db.commit()
    return _affiliation_response(affiliation, f"Company '{affiliation.company.name}' created")


@router.post("/company/join", response_model=AffiliationResponse)
def join_company(
    data: JoinCodeRequest,
    current_user: CurrentUser,
    db: Session = Depends(get_db),
    services: TenancyServices = Depends(get_tenancy_services),
) -> AffiliationResponse:
    """Join a company by join code as USER (404 for an unknown code)."""
    affiliation = services.boundary.join_company(current_user.id, data.join_code)
    db.commit()
    return _affiliation_response(affiliation, f"Successfully joined {affiliation.company.name}")


@router.post("/company/switch", response_model=AffiliationResponse)
def switch_company(
    data: JoinCodeRequest,
    current_user: CurrentUser,
    db: Session = Depends(get_db),
    services: TenancyServices = Depends(get_tenancy_services),
) -> AffiliationResponse:
    """Switch the caller's active company, keeping their role.

    The previous company stays visible through the audit trail. Switching to
    the current company is a 409 and writes nothing.
    """
    affiliation = services.boundary.switch_company(current_user.id, data.join_code)
    db.commit()
    return _affiliation_response(affiliation, f"Successfully switched to {affiliation.company.name}")


@router.get("/user/companies", response_model=UserCompaniesResponse)
def list_user_companies(
    current_user: CurrentUser,
    services: TenancyServices = Depends(get_tenancy_services),
) -> UserCompaniesResponse:
    """Companies the caller may see: current, ancestors, history and (ADMIN) children."""
    visible = services.access.resolve_visible_companies(current_user.id)
    return UserCompaniesResponse(
        companies=[
            VisibleCompanyResponse(
                **CompanyResponse.model_validate(entry.company).model_dump(),
                is_current=entry.is_current,
            )
            for entry in visible
        ],
        current_company_id=current_user.company_id,
    )


@router.get("/admin/organization-tree", response_model=OrganizationTreeResponse)
def get_organization_tree(
    admin: CurrentAdmin,
    services: TenancyServices = Depends(get_tenancy_services),
) -> OrganizationTreeResponse:
    """Tree rooted at the top of the caller's hierarchy, with member counts."""
    root = services.hierarchy.find_root(admin.company_id)
    tree = services.hierarchy.materialize_subtree(root.id)
    return OrganizationTreeResponse(
        tree=tree.to_nested(),
        truncated=tree.truncated,
        current_company_id=admin.company_id,
        user_role=admin.role,
    )


@router.post("/admin/child-company", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
def create_child_company(
    data: ChildCompanyRequest,
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
    services: TenancyServices = Depends(get_tenancy_services),
) -> CompanyResponse:
    """Create a SUBSIDIARY, BRANCH, LOCATION or DIVISION under the caller's company."""
    child = services.boundary.create_child_organization(
        admin.id,
        name=data.name,
        organization_type=data.organization_type,
        location=data.location,
        description=data.description,
    )
    db.commit()
    return CompanyResponse.model_validate(child)


@router.get("/admin/company", response_model=CompanyProfileResponse)
def get_company_profile(
    admin: CurrentAdmin,
    services: TenancyServices = Depends(get_tenancy_services),
) -> CompanyProfileResponse:
    profile = services.membership.get_company_profile(admin.id)
    return CompanyProfileResponse(
        company=CompanyResponse.model_validate(profile.company),
        users=[MemberResponse.model_validate(member) for member in profile.members],
        user_count=len(profile.members),
        child_count=profile.child_count,
    )


@router.patch("/admin/company", response_model=CompanyResponse)
def rename_company(
    data: CompanyUpdateRequest,
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
    services: TenancyServices = Depends(get_tenancy_services),
) -> CompanyResponse:
    company = services.membership.rename_company(admin.id, data.name)
    db.commit()
    return CompanyResponse.model_validate(company)
