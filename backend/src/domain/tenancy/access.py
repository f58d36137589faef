"""Access Resolver: which companies may a user see or select.

The visible set is the union of four independent signals:

1. the user's current company
2. every ancestor of the current company, up to the root (unbounded upward)
3. for ADMIN users, the direct children of the current company (one level only)
4. every company referenced by the user's audit entries, since a switch leaves
   no other trace of the companies the user belonged to

Each signal is collected independently; a corrupted parent chain degrades the
ancestor signal to the part walked before the failure instead of failing the
whole resolution.
"""

import logging
from uuid import UUID

from .audit_trail import AuditTrail
from .errors import HierarchyIntegrityError, NotFoundError
from .hierarchy import HierarchyGraph
from .models import Company, User, UserRole, VisibleCompany
from .ports import CompanyStorePort, UserStorePort

logger = logging.getLogger(__name__)


class AccessResolver:
    """Computes the set of companies visible to a user."""

    def __init__(
        self,
        companies: CompanyStorePort,
        users: UserStorePort,
        hierarchy: HierarchyGraph,
        audit_trail: AuditTrail,
    ):
        self.companies = companies
        self.users = users
        self.hierarchy = hierarchy
        self.audit_trail = audit_trail

    def resolve_visible_companies(self, user_id: UUID) -> list[VisibleCompany]:
        """Return the user's visible companies, sorted by name.

        Exactly one entry is flagged is_current when the user is affiliated.

        Raises:
            NotFoundError: user_id does not exist
        """
        user = self.users.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")

        visible: dict[UUID, Company] = {}
        if user.company_id is not None:
            self._add_current_and_ancestors(user, visible)
            if user.role == UserRole.ADMIN:
                for child in self.companies.list_children([user.company_id]):
                    visible.setdefault(child.id, child)

        historical_ids = [
            company_id for company_id in self.audit_trail.query_by_user(user.id)
            if company_id not in visible
        ]
        for company in self.companies.list_companies(historical_ids):
            visible.setdefault(company.id, company)

        return [
            VisibleCompany(company=company, is_current=company.id == user.company_id)
            for company in sorted(visible.values(), key=lambda c: (c.name.lower(), str(c.id)))
        ]

    def visible_company_ids(self, user_id: UUID) -> set[UUID]:
        """Ids of resolve_visible_companies, for bounding cross-tenant queries."""
        return {entry.company.id for entry in self.resolve_visible_companies(user_id)}

    def _add_current_and_ancestors(self, user: User, visible: dict[UUID, Company]) -> None:
        current = self.companies.get_company(user.company_id)
        if current is None:
            logger.warning(
                "User points at a missing company",
                extra={"user_id": user.id, "company_id": user.company_id},
            )
            return

        try:
            for company in self.hierarchy.walk_ancestors(current):
                visible.setdefault(company.id, company)
        except HierarchyIntegrityError:
            logger.error(
                "Ancestor walk aborted, continuing with partial ancestry",
                extra={"user_id": user.id, "company_id": current.id},
            )
