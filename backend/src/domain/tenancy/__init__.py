"""Tenancy domain module for GearBin.

Organizational hierarchy and multi-tenant access control: company lookup and
join codes, parent/child trees, visibility resolution, tenant boundary
transitions, membership administration and the audit trail.
"""

from .models import (
    OrganizationType,
    UserRole,
    AuditAction,
    Company,
    User,
    AuditEntry,
    Affiliation,
    VisibleCompany,
    CompanyTreeNode,
    OrganizationTree,
)
from .errors import (
    TenancyError,
    UnauthenticatedError,
    PermissionDeniedError,
    TenancyValidationError,
    NotFoundError,
    InvalidJoinCodeError,
    ConflictError,
    AlreadyAffiliatedError,
    NotAffiliatedError,
    AlreadyMemberError,
    HierarchyIntegrityError,
    JoinCodeExhaustedError,
    DuplicateJoinCodeError,
)
from .ports import CompanyStorePort, UserStorePort, AuditStorePort
from .directory import IdentityDirectory
from .hierarchy import HierarchyGraph
from .audit_trail import AuditTrail
from .access import AccessResolver
from .boundary import TenantBoundaryService
from .membership import MembershipService

__all__ = [
    "OrganizationType",
    "UserRole",
    "AuditAction",
    "Company",
    "User",
    "AuditEntry",
    "Affiliation",
    "VisibleCompany",
    "CompanyTreeNode",
    "OrganizationTree",
    "TenancyError",
    "UnauthenticatedError",
    "PermissionDeniedError",
    "TenancyValidationError",
    "NotFoundError",
    "InvalidJoinCodeError",
    "ConflictError",
    "AlreadyAffiliatedError",
    "NotAffiliatedError",
    "AlreadyMemberError",
    "HierarchyIntegrityError",
    "JoinCodeExhaustedError",
    "DuplicateJoinCodeError",
    "CompanyStorePort",
    "UserStorePort",
    "AuditStorePort",
    "IdentityDirectory",
    "HierarchyGraph",
    "AuditTrail",
    "AccessResolver",
    "TenantBoundaryService",
    "MembershipService",
]
