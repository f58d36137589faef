"""Hierarchy Graph: parent/child relations between companies.

The hierarchy lives in the store as an adjacency list (company.parent_company_id).
Trees are rebuilt on demand into an arena (OrganizationTree.nodes keyed by id);
no object graph of parent/child references is ever held.

Acyclicity is guaranteed at write time because children are only ever attached
under an existing company at creation, and parent pointers are never edited.
Reads do not re-verify it, but every walk is bounded: the upward walk fails with
HierarchyIntegrityError past its depth cap or on a revisit, and the downward
expansion stops (truncates) at its depth cap.
"""

import logging
from typing import Iterator, Optional
from uuid import UUID

from observability.metrics import hierarchy_integrity_failures_total

from .directory import IdentityDirectory
from .errors import PermissionDeniedError, TenancyValidationError, HierarchyIntegrityError
from .models import (
    CHILD_ORGANIZATION_TYPES,
    Company,
    CompanyTreeNode,
    OrganizationTree,
    OrganizationType,
    User,
    UserRole,
)
from .ports import CompanyStorePort

logger = logging.getLogger(__name__)

MAX_ANCESTOR_DEPTH = 1000
MAX_SUBTREE_DEPTH = 16
MAX_NAME_LENGTH = 100


def clean_company_name(name: Optional[str]) -> str:
    """Trim a company name and enforce 1..100 characters."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise TenancyValidationError("Company name is required")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise TenancyValidationError("Company name too long")
    return cleaned


def parse_child_organization_type(value) -> OrganizationType:
    """Parse an organization type for a child company (never PARENT)."""
    try:
        organization_type = OrganizationType(value)
    except ValueError:
        raise TenancyValidationError(f"Invalid organization type: {value}")

    if organization_type not in CHILD_ORGANIZATION_TYPES:
        raise TenancyValidationError(
            "Child organizations must be SUBSIDIARY, BRANCH, LOCATION or DIVISION"
        )
    return organization_type


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class HierarchyGraph:
    """Tree-shaped queries and child creation over the company adjacency list."""

    def __init__(
        self,
        companies: CompanyStorePort,
        directory: IdentityDirectory,
        max_ancestor_depth: int = MAX_ANCESTOR_DEPTH,
        max_subtree_depth: int = MAX_SUBTREE_DEPTH,
    ):
        self.companies = companies
        self.directory = directory
        self.max_ancestor_depth = max_ancestor_depth
        self.max_subtree_depth = max_subtree_depth

    def create_child(
        self,
        actor: User,
        parent_id: UUID,
        name: str,
        organization_type,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Company:
        """Create a child organization under parent_id.

        Input is validated before permissions, so a PARENT-typed child is a
        validation error whatever the caller's role.

        Raises:
            TenancyValidationError: Empty name or invalid organization type
            PermissionDeniedError: Actor is not ADMIN of exactly parent_id
            NotFoundError: parent_id does not exist
        """
        cleaned_name = clean_company_name(name)
        child_type = parse_child_organization_type(organization_type)

        if actor.role != UserRole.ADMIN:
            raise PermissionDeniedError("Only company admins can create child organizations")
        if actor.company_id != parent_id:
            raise PermissionDeniedError("You can only create child organizations for your own company")

        parent = self.directory.find_company_by_id(parent_id)

        child = self.directory.register_company(
            name=cleaned_name,
            organization_type=child_type,
            parent_company_id=parent.id,
            location=_optional_text(location),
            description=_optional_text(description),
        )
        logger.info(
            f"Created {child_type.value} '{child.name}' under '{parent.name}'",
            extra={"company_id": child.id, "user_id": actor.id},
        )
        return child

    def walk_ancestors(self, company: Company) -> Iterator[Company]:
        """Yield company, then each ancestor up to the root.

        A parent id that no longer resolves ends the walk at the last company
        found, which is then treated as the root.

        Raises:
            HierarchyIntegrityError: On a revisited node or when the chain is
                longer than max_ancestor_depth
        """
        seen = {company.id}
        current = company
        yield current

        depth = 0
        while current.parent_company_id is not None:
            depth += 1
            if depth > self.max_ancestor_depth or current.parent_company_id in seen:
                hierarchy_integrity_failures_total.inc()
                logger.error(
                    "Parent chain is cyclic or exceeds the depth bound",
                    extra={"company_id": company.id, "depth": depth},
                )
                raise HierarchyIntegrityError()

            parent = self.companies.get_company(current.parent_company_id)
            if parent is None:
                logger.warning(
                    "Dangling parent reference, treating last company as root",
                    extra={"company_id": current.id},
                )
                return

            seen.add(parent.id)
            current = parent
            yield current

    def find_root(self, company_id: UUID) -> Company:
        """Follow parent pointers from company_id to the top of its tree.

        Raises:
            NotFoundError: company_id does not exist
            HierarchyIntegrityError: Corrupted parent chain
        """
        root = self.directory.find_company_by_id(company_id)
        for root in self.walk_ancestors(root):
            pass
        return root

    def materialize_subtree(self, root_id: UUID) -> OrganizationTree:
        """Load the subtree under root_id breadth-first.

        Each level is one batched children query. Expansion stops at
        max_subtree_depth levels below the root; if children exist beyond that
        the tree is returned with truncated=True. Nodes are annotated with the
        number of affiliated users and of loaded descendants.

        Raises:
            NotFoundError: root_id does not exist
        """
        root = self.directory.find_company_by_id(root_id)
        tree = OrganizationTree(root_id=root.id)
        tree.nodes[root.id] = CompanyTreeNode(company=root, depth=0)

        order = [root.id]
        frontier = [root.id]
        depth = 0
        while frontier:
            children = self.companies.list_children(frontier)
            if not children:
                break
            if depth >= self.max_subtree_depth:
                tree.truncated = True
                logger.warning(
                    "Organization tree truncated at depth bound",
                    extra={"company_id": root.id, "depth": depth},
                )
                break

            depth += 1
            next_frontier = []
            for child in sorted(children, key=lambda c: c.name.lower()):
                if child.id in tree.nodes:
                    # Revisit means a corrupted chain; never expand it twice.
                    continue
                tree.nodes[child.id] = CompanyTreeNode(company=child, depth=depth)
                tree.nodes[child.parent_company_id].child_ids.append(child.id)
                order.append(child.id)
                next_frontier.append(child.id)
            frontier = next_frontier

        user_counts = self.companies.count_users(order)
        for company_id in reversed(order):
            node = tree.nodes[company_id]
            node.user_count = user_counts.get(company_id, 0)
            node.descendant_count = sum(
                1 + tree.nodes[child_id].descendant_count for child_id in node.child_ids
            )

        return tree
