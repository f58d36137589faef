"""Membership administration inside the caller's current company.

Every operation requires an affiliated ADMIN and only ever touches users of the
admin's own company; a target in another company is reported exactly like a
missing user.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from observability.metrics import membership_changes_total

from .audit_trail import AuditTrail
from .directory import IdentityDirectory
from .errors import ConflictError, NotFoundError, PermissionDeniedError, TenancyValidationError
from .hierarchy import clean_company_name
from .models import AuditAction, Company, User, UserRole
from .ports import CompanyStorePort, UserStorePort

logger = logging.getLogger(__name__)


@dataclass
class CompanyProfile:
    company: Company
    members: list[User]
    child_count: int


@dataclass
class Invitation:
    email: str
    company: Company
    instructions: str


class MembershipService:
    """Admin operations on the members of one company."""

    def __init__(
        self,
        directory: IdentityDirectory,
        companies: CompanyStorePort,
        users: UserStorePort,
        audit_trail: AuditTrail,
    ):
        self.directory = directory
        self.companies = companies
        self.users = users
        self.audit_trail = audit_trail

    def get_company_profile(self, admin_id: UUID) -> CompanyProfile:
        admin = self._admin(admin_id)
        company = self.directory.find_company_by_id(admin.company_id)
        return CompanyProfile(
            company=company,
            members=self.users.list_company_users(company.id),
            child_count=len(self.companies.list_children([company.id])),
        )

    def rename_company(self, admin_id: UUID, name: str) -> Company:
        admin = self._admin(admin_id)
        cleaned = clean_company_name(name)
        company = self.companies.update_company_name(admin.company_id, cleaned)
        self.audit_trail.append(
            action=AuditAction.COMPANY_UPDATED,
            user_id=admin.id,
            company_id=company.id,
            item_name="Company Update",
            note=f"Renamed company to: {company.name}",
        )
        return company

    def change_user_role(self, admin_id: UUID, target_user_id: UUID, role) -> User:
        """Set a member's role.

        Raises:
            TenancyValidationError: role is not ADMIN or USER
            NotFoundError: target is not a member of the admin's company
            ConflictError: admin tries to demote themself
        """
        admin = self._admin(admin_id)
        try:
            new_role = UserRole(role)
        except ValueError:
            raise TenancyValidationError("Invalid role")

        target = self._member(admin, target_user_id)
        if target.id == admin.id and new_role != UserRole.ADMIN:
            raise ConflictError("Cannot change your own admin role")

        previous_role = target.role
        target = self.users.set_role(target.id, new_role)
        self.audit_trail.append(
            action=AuditAction.USER_ROLE_CHANGED,
            user_id=admin.id,
            company_id=admin.company_id,
            item_name=f"Role change for {target.email}",
            note=f"{previous_role.value} -> {new_role.value}",
        )
        membership_changes_total.labels(action="role_change").inc()
        logger.info(
            f"Role changed to {new_role.value}",
            extra={"user_id": admin.id, "company_id": admin.company_id, "target_user_id": target.id},
        )
        return target

    def remove_user(self, admin_id: UUID, target_user_id: UUID) -> User:
        """Detach a member from the company; they become an Unaffiliated USER.

        Raises:
            NotFoundError: target is not a member of the admin's company
            ConflictError: admin tries to remove themself
        """
        admin = self._admin(admin_id)
        target = self._member(admin, target_user_id)
        if target.id == admin.id:
            raise ConflictError("Cannot remove yourself from the company")

        target = self.users.set_affiliation(target.id, None, UserRole.USER)
        self.audit_trail.append(
            action=AuditAction.USER_REMOVED,
            user_id=admin.id,
            company_id=admin.company_id,
            item_name=f"Removed {target.email}",
            note="Admin removed user from company",
        )
        membership_changes_total.labels(action="remove").inc()
        logger.info(
            "User removed from company",
            extra={"user_id": admin.id, "company_id": admin.company_id, "target_user_id": target.id},
        )
        return target

    def invite_user(self, admin_id: UUID, email: Optional[str]) -> Invitation:
        """Prepare an invitation: the join code to share with email.

        Raises:
            TenancyValidationError: email is empty
            ConflictError: the user already belongs to this or another company
        """
        admin = self._admin(admin_id)
        normalized = (email or "").strip().lower()
        if not normalized:
            raise TenancyValidationError("Email is required")

        existing = self.users.get_user_by_email(normalized)
        if existing is not None and existing.company_id == admin.company_id:
            raise ConflictError("User is already part of your company")
        if existing is not None and existing.is_affiliated:
            raise ConflictError("User already belongs to another company")

        company = self.directory.find_company_by_id(admin.company_id)
        self.audit_trail.append(
            action=AuditAction.USER_INVITED,
            user_id=admin.id,
            company_id=company.id,
            item_name=f"Invitation sent to {normalized}",
            note=f"Admin invited {normalized} to join company",
        )
        membership_changes_total.labels(action="invite").inc()

        instructions = (
            f"Share the following information with {normalized}:\n\n"
            f"Company: {company.name}\n"
            f"Join Code: {company.join_code}\n\n"
            "They can sign up at the registration page and use this join code to join your company."
        )
        return Invitation(email=normalized, company=company, instructions=instructions)

    def _admin(self, admin_id: UUID) -> User:
        admin = self.users.get_user(admin_id)
        if admin is None:
            raise NotFoundError("User not found")
        if not admin.is_affiliated:
            raise PermissionDeniedError("You must belong to a company")
        if admin.role != UserRole.ADMIN:
            raise PermissionDeniedError()
        return admin

    def _member(self, admin: User, target_user_id: UUID) -> User:
        target = self.users.get_user(target_user_id)
        if target is None or target.company_id != admin.company_id:
            raise NotFoundError("User not found or not in your company")
        return target
