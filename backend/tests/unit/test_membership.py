"""Unit tests for membership administration

Tests cover:
- Company profile and rename
- Role changes, including self-demotion
- Removal, including self-removal
- Invitations
- Tenant scoping of every target
"""

import pytest

from domain.tenancy import ConflictError, NotFoundError, PermissionDeniedError, TenancyValidationError
from domain.tenancy.models import AuditAction, UserRole


pytestmark = pytest.mark.unit


@pytest.fixture
def acme(tenancy):
    return tenancy.add_company("Acme", "ACME0001")


@pytest.fixture
def admin(tenancy, acme):
    return tenancy.users.add("admin@acme.com", company_id=acme.id, role=UserRole.ADMIN)


@pytest.fixture
def member(tenancy, acme):
    return tenancy.users.add("member@acme.com", company_id=acme.id)


@pytest.fixture
def outsider(tenancy):
    globex = tenancy.add_company("Globex", "GLOB0001")
    return tenancy.users.add("someone@globex.com", company_id=globex.id)


class TestCompanyProfile:

    def test_profile_lists_members_in_join_order(self, tenancy, acme, admin, member):
        tenancy.add_company("Acme West", "WEST0001", parent=acme)

        profile = tenancy.membership.get_company_profile(admin.id)

        assert profile.company.id == acme.id
        assert [u.email for u in profile.members] == ["admin@acme.com", "member@acme.com"]
        assert profile.child_count == 1

    def test_regular_user_denied(self, tenancy, member):
        with pytest.raises(PermissionDeniedError):
            tenancy.membership.get_company_profile(member.id)

    def test_rename(self, tenancy, acme, admin):
        company = tenancy.membership.rename_company(admin.id, "  Acme Corp ")

        assert company.name == "Acme Corp"
        assert tenancy.audit.actions() == [AuditAction.COMPANY_UPDATED]

    def test_rename_to_blank_rejected(self, tenancy, admin):
        with pytest.raises(TenancyValidationError):
            tenancy.membership.rename_company(admin.id, "   ")


class TestChangeUserRole:

    def test_promote_member(self, tenancy, admin, member):
        updated = tenancy.membership.change_user_role(admin.id, member.id, "ADMIN")

        assert updated.role == UserRole.ADMIN
        [entry] = tenancy.audit.entries
        assert entry.action == AuditAction.USER_ROLE_CHANGED
        assert entry.note == "USER -> ADMIN"

    def test_self_demotion_is_conflict(self, tenancy, admin):
        with pytest.raises(ConflictError):
            tenancy.membership.change_user_role(admin.id, admin.id, UserRole.USER)

        assert tenancy.users.get_user(admin.id).role == UserRole.ADMIN

    def test_invalid_role(self, tenancy, admin, member):
        with pytest.raises(TenancyValidationError):
            tenancy.membership.change_user_role(admin.id, member.id, "OWNER")

    def test_target_in_other_company_looks_missing(self, tenancy, admin, outsider):
        with pytest.raises(NotFoundError, match="not in your company"):
            tenancy.membership.change_user_role(admin.id, outsider.id, UserRole.ADMIN)

        assert tenancy.users.get_user(outsider.id).role == UserRole.USER


class TestRemoveUser:

    def test_removed_member_becomes_unaffiliated_user(self, tenancy, admin, member):
        tenancy.membership.change_user_role(admin.id, member.id, UserRole.ADMIN)

        removed = tenancy.membership.remove_user(admin.id, member.id)

        assert removed.company_id is None
        assert removed.role == UserRole.USER
        assert tenancy.audit.actions()[-1] == AuditAction.USER_REMOVED

    def test_self_removal_is_conflict(self, tenancy, acme, admin):
        with pytest.raises(ConflictError):
            tenancy.membership.remove_user(admin.id, admin.id)

        assert tenancy.users.get_user(admin.id).company_id == acme.id

    def test_target_in_other_company_looks_missing(self, tenancy, admin, outsider):
        with pytest.raises(NotFoundError):
            tenancy.membership.remove_user(admin.id, outsider.id)

        assert tenancy.users.get_user(outsider.id).company_id is not None


class TestInviteUser:

    def test_invitation_carries_join_code(self, tenancy, admin):
        invitation = tenancy.membership.invite_user(admin.id, " New.Hire@Acme.com ")

        assert invitation.email == "new.hire@acme.com"
        assert invitation.company.join_code == "ACME0001"
        assert "Join Code: ACME0001" in invitation.instructions
        assert tenancy.audit.actions() == [AuditAction.USER_INVITED]

    def test_existing_member_is_conflict(self, tenancy, admin, member):
        with pytest.raises(ConflictError, match="already part of your company"):
            tenancy.membership.invite_user(admin.id, member.email)

    def test_member_of_other_company_is_conflict(self, tenancy, admin, outsider):
        with pytest.raises(ConflictError, match="another company"):
            tenancy.membership.invite_user(admin.id, outsider.email)

    def test_unaffiliated_user_can_be_invited(self, tenancy, admin):
        tenancy.users.add("drifter@test.com")

        assert tenancy.membership.invite_user(admin.id, "drifter@test.com").email == "drifter@test.com"

    def test_blank_email(self, tenancy, admin):
        with pytest.raises(TenancyValidationError):
            tenancy.membership.invite_user(admin.id, "  ")
