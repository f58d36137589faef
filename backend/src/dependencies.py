"""Global FastAPI dependencies for tenancy services.

This module provides:
- TenancyServices: the tenancy core wired onto one request's database session
- get_tenancy_services: FastAPI dependency building that bundle

Services share the request session, so every write they make lands in the one
transaction the router commits at the end of the request.
"""

from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.orm import Session

from config import Settings, get_settings
from database import get_db
from domain.tenancy import (
    AccessResolver,
    AuditTrail,
    HierarchyGraph,
    IdentityDirectory,
    MembershipService,
    TenantBoundaryService,
)
from infrastructure.repositories.tenancy_repository import (
    AuditRepository,
    CompanyRepository,
    UserRepository,
)


@dataclass
class TenancyServices:
    directory: IdentityDirectory
    hierarchy: HierarchyGraph
    audit_trail: AuditTrail
    access: AccessResolver
    boundary: TenantBoundaryService
    membership: MembershipService


def build_tenancy_services(db: Session, settings: Settings) -> TenancyServices:
    """Wire the tenancy services onto SQLAlchemy repositories sharing db."""
    companies = CompanyRepository(db)
    users = UserRepository(db)
    audit_trail = AuditTrail(AuditRepository(db))

    directory = IdentityDirectory(
        companies,
        max_attempts=settings.JOIN_CODE_MAX_ATTEMPTS,
    )
    hierarchy = HierarchyGraph(
        companies,
        directory,
        max_ancestor_depth=settings.HIERARCHY_MAX_ANCESTOR_DEPTH,
        max_subtree_depth=settings.HIERARCHY_MAX_SUBTREE_DEPTH,
    )

    return TenancyServices(
        directory=directory,
        hierarchy=hierarchy,
        audit_trail=audit_trail,
        access=AccessResolver(companies, users, hierarchy, audit_trail),
        boundary=TenantBoundaryService(directory, hierarchy, users, audit_trail),
        membership=MembershipService(directory, companies, users, audit_trail),
    )


def get_tenancy_services(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TenancyServices:
    """Tenancy services bound to the request's database session."""
    return build_tenancy_services(db, settings)
