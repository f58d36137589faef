"""Unit tests for the Tenant Boundary Service

Tests cover:
- Create / join / switch transitions and their audit entries
- Refusals that must leave state untouched
- Child organization creation through the boundary
- Transition metrics
"""

import pytest

from domain.tenancy import (
    AlreadyAffiliatedError,
    AlreadyMemberError,
    InvalidJoinCodeError,
    NotAffiliatedError,
    NotFoundError,
    PermissionDeniedError,
    TenancyValidationError,
)
from domain.tenancy.models import AuditAction, OrganizationType, UserRole
from observability.metrics import tenancy_transitions_total


pytestmark = pytest.mark.unit


def transitions(action: str, outcome: str) -> float:
    return tenancy_transitions_total.labels(action=action, outcome=outcome)._value.get()


class TestCreateCompany:

    def test_creator_becomes_admin_of_new_root(self, tenancy):
        user = tenancy.users.add("founder@acme.com")

        result = tenancy.boundary.create_company(user.id, "  Acme  ", location="Denver")

        assert result.company.name == "Acme"
        assert result.company.parent_company_id is None
        assert result.company.organization_type == OrganizationType.PARENT
        assert result.user.company_id == result.company.id
        assert result.user.role == UserRole.ADMIN
        assert len(result.company.join_code) == 8

    def test_appends_company_create(self, tenancy):
        user = tenancy.users.add("founder@acme.com")

        result = tenancy.boundary.create_company(user.id, "Acme")

        [entry] = tenancy.audit.entries
        assert entry.action == AuditAction.COMPANY_CREATE
        assert entry.user_id == user.id
        assert entry.company_id == result.company.id

    def test_affiliated_user_refused(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        user = tenancy.users.add("member@acme.com", company_id=acme.id)

        with pytest.raises(AlreadyAffiliatedError):
            tenancy.boundary.create_company(user.id, "Second Acme")

        assert len(tenancy.companies.companies) == 1
        assert tenancy.audit.entries == []

    def test_empty_name_refused(self, tenancy):
        user = tenancy.users.add("founder@acme.com")

        with pytest.raises(TenancyValidationError):
            tenancy.boundary.create_company(user.id, "   ")

        assert tenancy.users.get_user(user.id).company_id is None

    def test_unknown_user(self, tenancy):
        from uuid import uuid4

        with pytest.raises(NotFoundError):
            tenancy.boundary.create_company(uuid4(), "Acme")


class TestJoinCompany:

    def test_joiner_becomes_user(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        user = tenancy.users.add("new@acme.com")

        result = tenancy.boundary.join_company(user.id, " acme0001 ")

        assert result.company.id == acme.id
        assert result.user.role == UserRole.USER
        assert tenancy.audit.actions() == [AuditAction.COMPANY_JOIN]
        assert tenancy.audit.entries[0].company_id == acme.id

    def test_unknown_code_leaves_user_unaffiliated(self, tenancy):
        user = tenancy.users.add("new@acme.com")

        with pytest.raises(InvalidJoinCodeError):
            tenancy.boundary.join_company(user.id, "BADCODE1")

        assert tenancy.users.get_user(user.id).company_id is None
        assert tenancy.audit.entries == []

    def test_wrong_length_is_validation_error(self, tenancy):
        user = tenancy.users.add("new@acme.com")

        with pytest.raises(TenancyValidationError):
            tenancy.boundary.join_company(user.id, "ABC")

    def test_affiliated_user_refused(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        tenancy.add_company("Globex", "GLOB0001")
        user = tenancy.users.add("member@acme.com", company_id=acme.id)

        with pytest.raises(AlreadyAffiliatedError):
            tenancy.boundary.join_company(user.id, "GLOB0001")

        assert tenancy.users.get_user(user.id).company_id == acme.id


class TestSignup:

    def test_signup_create(self, tenancy):
        user = tenancy.users.add("founder@acme.com")

        result = tenancy.boundary.signup_create(user.id, "Acme")

        assert result.user.role == UserRole.ADMIN
        assert tenancy.audit.actions() == [AuditAction.COMPANY_CREATE]

    def test_signup_join(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        user = tenancy.users.add("new@acme.com")

        result = tenancy.boundary.signup_join(user.id, "ACME0001")

        assert result.company.id == acme.id
        assert result.user.role == UserRole.USER
        assert tenancy.audit.actions() == [AuditAction.COMPANY_JOIN]


class TestSwitchCompany:

    def test_switch_moves_pointer_and_keeps_role(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        globex = tenancy.add_company("Globex", "GLOB0001")
        admin = tenancy.users.add("admin@acme.com", company_id=acme.id, role=UserRole.ADMIN)

        result = tenancy.boundary.switch_company(admin.id, "glob0001")

        assert result.company.id == globex.id
        assert result.user.company_id == globex.id
        assert result.user.role == UserRole.ADMIN

    def test_switch_audit_tagged_with_target(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        globex = tenancy.add_company("Globex", "GLOB0001")
        user = tenancy.users.add("user@acme.com", company_id=acme.id)

        tenancy.boundary.switch_company(user.id, "GLOB0001")

        [entry] = tenancy.audit.entries
        assert entry.action == AuditAction.COMPANY_SWITCH
        assert entry.company_id == globex.id
        assert entry.item_name == "Company Switch"
        assert entry.note == "Switched to company: Globex"

    def test_switch_to_current_company_is_conflict_without_audit(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        user = tenancy.users.add("user@acme.com", company_id=acme.id)

        with pytest.raises(AlreadyMemberError):
            tenancy.boundary.switch_company(user.id, "ACME0001")

        assert tenancy.audit.entries == []

    def test_switch_unknown_code(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        user = tenancy.users.add("user@acme.com", company_id=acme.id)

        with pytest.raises(InvalidJoinCodeError):
            tenancy.boundary.switch_company(user.id, "BADCODE1")

        assert tenancy.users.get_user(user.id).company_id == acme.id

    def test_unaffiliated_user_cannot_switch(self, tenancy):
        tenancy.add_company("Acme", "ACME0001")
        user = tenancy.users.add("new@acme.com")

        with pytest.raises(NotAffiliatedError):
            tenancy.boundary.switch_company(user.id, "ACME0001")

    def test_metrics_count_outcomes(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        tenancy.add_company("Globex", "GLOB0001")
        user = tenancy.users.add("user@acme.com", company_id=acme.id)
        success_before = transitions("COMPANY_SWITCH", "success")
        conflict_before = transitions("COMPANY_SWITCH", "already_member")

        tenancy.boundary.switch_company(user.id, "GLOB0001")
        with pytest.raises(AlreadyMemberError):
            tenancy.boundary.switch_company(user.id, "GLOB0001")

        assert transitions("COMPANY_SWITCH", "success") == success_before + 1
        assert transitions("COMPANY_SWITCH", "already_member") == conflict_before + 1


class TestCreateChildOrganization:

    def test_child_created_under_current_company(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        admin = tenancy.users.add("admin@acme.com", company_id=acme.id, role=UserRole.ADMIN)

        child = tenancy.boundary.create_child_organization(admin.id, "Acme West", "BRANCH")

        assert child.parent_company_id == acme.id
        [entry] = tenancy.audit.entries
        assert entry.action == AuditAction.CHILD_COMPANY_CREATE
        assert entry.company_id == acme.id
        assert tenancy.users.get_user(admin.id).company_id == acme.id

    def test_unaffiliated_user_denied(self, tenancy):
        user = tenancy.users.add("new@acme.com")

        with pytest.raises(PermissionDeniedError):
            tenancy.boundary.create_child_organization(user.id, "Branch", "BRANCH")

    def test_regular_user_denied(self, tenancy):
        acme = tenancy.add_company("Acme", "ACME0001")
        user = tenancy.users.add("user@acme.com", company_id=acme.id)

        with pytest.raises(PermissionDeniedError):
            tenancy.boundary.create_child_organization(user.id, "Branch", "BRANCH")

        assert tenancy.audit.entries == []
