"""Tenancy models and enums.

Domain-level records for companies (tenant nodes), users and audit entries.
These are plain dataclasses, not ORM rows: the persistence ports hand them out
and the services never hold references between them, only ids. Hierarchy trees
are rebuilt on demand as an arena (flat id -> node map) in OrganizationTree.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class OrganizationType(str, Enum):
    """Descriptive label of a company's place in an organization.

    Purely metadata for rendering. Hierarchy position is always derived from
    parent_company_id, never from this value.
    """
    PARENT = "PARENT"
    SUBSIDIARY = "SUBSIDIARY"
    BRANCH = "BRANCH"
    LOCATION = "LOCATION"
    DIVISION = "DIVISION"


CHILD_ORGANIZATION_TYPES = frozenset({
    OrganizationType.SUBSIDIARY,
    OrganizationType.BRANCH,
    OrganizationType.LOCATION,
    OrganizationType.DIVISION,
})


class UserRole(str, Enum):
    """Role of a user inside their current company.

    Values are stored as TEXT in the database and must match exactly.
    """
    ADMIN = "ADMIN"
    USER = "USER"


class AuditAction(str, Enum):
    """Actions recorded in the audit trail."""
    # Tenant boundary transitions
    COMPANY_SWITCH = "COMPANY_SWITCH"
    COMPANY_CREATE = "COMPANY_CREATE"
    COMPANY_JOIN = "COMPANY_JOIN"

    # Hierarchy and membership administration
    CHILD_COMPANY_CREATE = "CHILD_COMPANY_CREATE"
    COMPANY_UPDATED = "COMPANY_UPDATED"
    USER_ROLE_CHANGED = "USER_ROLE_CHANGED"
    USER_REMOVED = "USER_REMOVED"
    USER_INVITED = "USER_INVITED"

    # Inventory mutations
    CSV_EXPORT = "CSV_EXPORT"
    CSV_IMPORT = "CSV_IMPORT"
    CREATE_ITEM = "CREATE_ITEM"
    UPDATE_QUANTITY = "UPDATE_QUANTITY"
    UPDATED = "UPDATED"


TENANT_BOUNDARY_ACTIONS = frozenset({
    AuditAction.COMPANY_SWITCH,
    AuditAction.COMPANY_CREATE,
    AuditAction.COMPANY_JOIN,
})


@dataclass
class Company:
    """A tenant node. parent_company_id is a flat reference, not an object."""
    id: UUID
    name: str
    join_code: str
    organization_type: OrganizationType = OrganizationType.PARENT
    parent_company_id: Optional[UUID] = None
    location: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_root(self) -> bool:
        return self.parent_company_id is None


@dataclass
class User:
    """A user and their single current affiliation."""
    id: UUID
    email: str
    name: str
    role: UserRole = UserRole.USER
    company_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    @property
    def is_affiliated(self) -> bool:
        return self.company_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass
class AuditEntry:
    """One append-only audit log record.

    company_id is the tenant context at the time of the action.
    """
    action: AuditAction
    user_id: UUID
    company_id: UUID
    item_id: Optional[UUID] = None
    item_name: Optional[str] = None
    quantity_change: Optional[int] = None
    previous_quantity: Optional[int] = None
    new_quantity: Optional[int] = None
    note: Optional[str] = None
    id: Optional[UUID] = None
    created_at: Optional[datetime] = None


@dataclass
class Affiliation:
    """Result of a tenant boundary transition."""
    user: User
    company: Company


@dataclass
class VisibleCompany:
    """A company the user may see or select, flagged if it is the current one."""
    company: Company
    is_current: bool = False


@dataclass
class CompanyTreeNode:
    """Arena node: relations are expressed as ids into OrganizationTree.nodes."""
    company: Company
    depth: int
    child_ids: list[UUID] = field(default_factory=list)
    user_count: int = 0
    descendant_count: int = 0


@dataclass
class OrganizationTree:
    """A materialized subtree rooted at root_id.

    truncated is True when the depth cap stopped the expansion while more
    children existed below the deepest loaded level.
    """
    root_id: UUID
    nodes: dict[UUID, CompanyTreeNode] = field(default_factory=dict)
    truncated: bool = False

    @property
    def root(self) -> CompanyTreeNode:
        return self.nodes[self.root_id]

    def children_of(self, company_id: UUID) -> list[CompanyTreeNode]:
        return [self.nodes[child_id] for child_id in self.nodes[company_id].child_ids]

    def to_nested(self, company_id: Optional[UUID] = None) -> dict:
        """Render the arena as nested dicts for API responses."""
        node = self.nodes[company_id or self.root_id]
        company = node.company
        return {
            "id": company.id,
            "name": company.name,
            "join_code": company.join_code,
            "organization_type": company.organization_type,
            "parent_company_id": company.parent_company_id,
            "location": company.location,
            "description": company.description,
            "user_count": node.user_count,
            "descendant_count": node.descendant_count,
            "children": [self.to_nested(child_id) for child_id in node.child_ids],
        }
