"""Tenant Boundary Service: create, join and switch a user's active company.

Per user the state is either Unaffiliated (company_id is None) or
Affiliated(company_id, role):

    signup_create / create_company   Unaffiliated -> Affiliated(new, ADMIN)
    signup_join / join_company       Unaffiliated -> Affiliated(code, USER)
    switch_company                   Affiliated(A, r) -> Affiliated(B, r)
    create_child_organization        Affiliated(A, ADMIN), unchanged

Every transition appends exactly one audit entry. The service only flushes; the
caller owns the transaction and commits once, so the company insert, the user
update and the audit append land together or not at all.

Switching keeps the role the user had in the previous company. This mirrors the
existing behavior and is tracked as an open question in DESIGN.md.
"""

import functools
import logging
from typing import Optional
from uuid import UUID

from observability.metrics import tenancy_transitions_total

from .audit_trail import AuditTrail
from .directory import IdentityDirectory
from .errors import (
    TenancyError,
    AlreadyAffiliatedError,
    AlreadyMemberError,
    NotAffiliatedError,
    NotFoundError,
    PermissionDeniedError,
)
from .hierarchy import HierarchyGraph, clean_company_name
from .models import Affiliation, AuditAction, Company, OrganizationType, User, UserRole
from .ports import UserStorePort

logger = logging.getLogger(__name__)


def counted_transition(action: AuditAction):
    """Count every call of a transition by action and outcome."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except TenancyError as e:
                tenancy_transitions_total.labels(action=action.value, outcome=e.code).inc()
                raise
            tenancy_transitions_total.labels(action=action.value, outcome="success").inc()
            return result

        return wrapper

    return decorator


class TenantBoundaryService:
    """Moves users across tenant boundaries."""

    def __init__(
        self,
        directory: IdentityDirectory,
        hierarchy: HierarchyGraph,
        users: UserStorePort,
        audit_trail: AuditTrail,
    ):
        self.directory = directory
        self.hierarchy = hierarchy
        self.users = users
        self.audit_trail = audit_trail

    @counted_transition(AuditAction.COMPANY_CREATE)
    def signup_create(self, user_id: UUID, company_name: str) -> Affiliation:
        """Create a company for a freshly registered user, who becomes ADMIN."""
        return self._create(self._unaffiliated_user(user_id), company_name, note_prefix="Signed up and created")

    @counted_transition(AuditAction.COMPANY_JOIN)
    def signup_join(self, user_id: UUID, join_code: str) -> Affiliation:
        """Join a company by code for a freshly registered user, as USER."""
        return self._join(self._unaffiliated_user(user_id), join_code, note_prefix="Signed up and joined")

    @counted_transition(AuditAction.COMPANY_CREATE)
    def create_company(
        self,
        user_id: UUID,
        name: str,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Affiliation:
        """Create a root company and make the caller its ADMIN.

        Raises:
            AlreadyAffiliatedError: Caller already belongs to a company
            TenancyValidationError: Empty or overlong name
        """
        user = self._unaffiliated_user(user_id)
        return self._create(user, name, location=location, description=description, note_prefix="Created")

    @counted_transition(AuditAction.COMPANY_JOIN)
    def join_company(self, user_id: UUID, join_code: str) -> Affiliation:
        """Join a company by join code as USER.

        Raises:
            AlreadyAffiliatedError: Caller already belongs to a company
            TenancyValidationError: Malformed join code
            InvalidJoinCodeError: No company uses this code
        """
        return self._join(self._unaffiliated_user(user_id), join_code, note_prefix="Joined")

    @counted_transition(AuditAction.COMPANY_SWITCH)
    def switch_company(self, user_id: UUID, join_code: str) -> Affiliation:
        """Move the caller's active company to the one behind join_code.

        The role is carried over unchanged. The audit entry is tagged with the
        new company and written after the user update.

        Raises:
            NotAffiliatedError: Caller has no current company
            InvalidJoinCodeError: No company uses this code
            AlreadyMemberError: Target is the current company (nothing is written)
        """
        user = self._user(user_id)
        if not user.is_affiliated:
            raise NotAffiliatedError()

        target = self.directory.find_company_by_join_code(join_code)
        if target.id == user.company_id:
            raise AlreadyMemberError()

        previous_company_id = user.company_id
        user = self.users.set_affiliation(user.id, target.id, user.role)
        self.audit_trail.append(
            action=AuditAction.COMPANY_SWITCH,
            user_id=user.id,
            company_id=target.id,
            item_name="Company Switch",
            note=f"Switched to company: {target.name}",
        )
        logger.info(
            f"User switched to company '{target.name}'",
            extra={"user_id": user.id, "company_id": target.id, "previous_company_id": previous_company_id},
        )
        return Affiliation(user=user, company=target)

    @counted_transition(AuditAction.CHILD_COMPANY_CREATE)
    def create_child_organization(
        self,
        user_id: UUID,
        name: str,
        organization_type,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Company:
        """Create a child under the caller's current company.

        The caller's own affiliation does not change.

        Raises:
            TenancyValidationError: Empty name or invalid organization type
            PermissionDeniedError: Caller is not an affiliated ADMIN
        """
        user = self._user(user_id)
        if not user.is_affiliated:
            raise PermissionDeniedError("You must belong to a company to create child organizations")

        child = self.hierarchy.create_child(
            actor=user,
            parent_id=user.company_id,
            name=name,
            organization_type=organization_type,
            location=location,
            description=description,
        )
        self.audit_trail.append(
            action=AuditAction.CHILD_COMPANY_CREATE,
            user_id=user.id,
            company_id=user.company_id,
            item_name="Child Organization",
            note=f"Created {child.organization_type.value} '{child.name}'",
        )
        return child

    def _create(
        self,
        user: User,
        name: str,
        note_prefix: str,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Affiliation:
        company = self.directory.register_company(
            name=clean_company_name(name),
            organization_type=OrganizationType.PARENT,
            location=(location or "").strip() or None,
            description=(description or "").strip() or None,
        )
        user = self.users.set_affiliation(user.id, company.id, UserRole.ADMIN)
        self.audit_trail.append(
            action=AuditAction.COMPANY_CREATE,
            user_id=user.id,
            company_id=company.id,
            item_name="Company Create",
            note=f"{note_prefix} company: {company.name}",
        )
        logger.info(
            f"User created company '{company.name}'",
            extra={"user_id": user.id, "company_id": company.id},
        )
        return Affiliation(user=user, company=company)

    def _join(self, user: User, join_code: str, note_prefix: str) -> Affiliation:
        company = self.directory.find_company_by_join_code(join_code)
        user = self.users.set_affiliation(user.id, company.id, UserRole.USER)
        self.audit_trail.append(
            action=AuditAction.COMPANY_JOIN,
            user_id=user.id,
            company_id=company.id,
            item_name="Company Join",
            note=f"{note_prefix} company: {company.name}",
        )
        logger.info(
            f"User joined company '{company.name}'",
            extra={"user_id": user.id, "company_id": company.id},
        )
        return Affiliation(user=user, company=company)

    def _user(self, user_id: UUID) -> User:
        user = self.users.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _unaffiliated_user(self, user_id: UUID) -> User:
        user = self._user(user_id)
        if user.is_affiliated:
            raise AlreadyAffiliatedError()
        return user
