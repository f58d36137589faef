"""Integration tests for tenancy endpoints

Tests cover:
- Create / join / switch over HTTP, with refreshed tokens
- Visible companies after a switch
- Organization tree and child companies
- Company profile and rename
- Error body and status mapping
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from auth.jwt import decode_token
from models import AuditLog, Company, User


pytestmark = pytest.mark.integration


class TestCreateAndJoin:

    def test_unaffiliated_user_creates_company(self, client: TestClient, make_user, auth_headers):
        user = make_user("founder@acme.com")

        response = client.post(
            "/api/v1/company/create",
            json={"name": "Acme", "location": "Denver"},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["role"] == "ADMIN"
        assert body["company"]["location"] == "Denver"
        assert decode_token(body["access_token"])["company_id"] == body["company"]["id"]

    def test_affiliated_user_cannot_create(self, client: TestClient, admin_user: User, auth_headers):
        response = client.post("/api/v1/company/create", json={"name": "Acme 2"}, headers=auth_headers(admin_user))

        assert response.status_code == 409
        assert response.json()["error"] == "already_affiliated"

    def test_join_by_code(self, client: TestClient, acme: Company, make_user, auth_headers, db_session: Session):
        user = make_user("new@acme.com")

        response = client.post("/api/v1/company/join", json={"join_code": " acme0001 "}, headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["role"] == "USER"
        assert db_session.get(User, user.id).company_id == acme.id

    def test_join_unknown_code(self, client: TestClient, make_user, auth_headers, db_session: Session):
        user = make_user("new@acme.com")

        response = client.post("/api/v1/company/join", json={"join_code": "BADCODE1"}, headers=auth_headers(user))

        assert response.status_code == 404
        assert db_session.get(User, user.id).company_id is None
        assert db_session.query(AuditLog).count() == 0

    def test_requires_authentication(self, client: TestClient):
        assert client.post("/api/v1/company/join", json={"join_code": "ACME0001"}).status_code == 401


class TestSwitch:

    def test_acme_west_scenario(self, client: TestClient, make_user, auth_headers):
        """Create Acme, add Acme West, switch to it, both remain visible"""
        alice = make_user("alice@acme.com")
        headers = auth_headers(alice)
        client.post("/api/v1/company/create", json={"name": "Acme"}, headers=headers)

        child = client.post(
            "/api/v1/admin/child-company",
            json={"name": "Acme West", "organization_type": "BRANCH"},
            headers=headers,
        )
        assert child.status_code == 201

        switched = client.post(
            "/api/v1/company/switch",
            json={"join_code": child.json()["join_code"]},
            headers=headers,
        )
        assert switched.status_code == 200
        assert switched.json()["role"] == "ADMIN"

        companies = client.get("/api/v1/user/companies", headers=headers).json()
        assert [c["name"] for c in companies["companies"]] == ["Acme", "Acme West"]
        assert [c["name"] for c in companies["companies"] if c["is_current"]] == ["Acme West"]
        assert companies["current_company_id"] == child.json()["id"]

    def test_switch_to_current_company(self, client: TestClient, member_user: User, auth_headers, db_session: Session):
        response = client.post("/api/v1/company/switch", json={"join_code": "ACME0001"}, headers=auth_headers(member_user))

        assert response.status_code == 409
        assert response.json() == {"error": "already_member", "message": "You are already in this company"}
        assert db_session.query(AuditLog).count() == 0

    def test_stale_token_uses_current_company(self, client: TestClient, member_user: User, make_company, auth_headers):
        """A token issued before a switch must not carry the old tenant"""
        globex = make_company("Globex", "GLOB0001")
        old_headers = auth_headers(member_user)

        client.post("/api/v1/company/switch", json={"join_code": "GLOB0001"}, headers=old_headers)
        me = client.get("/api/v1/auth/me", headers=old_headers)

        assert me.json()["user"]["company_id"] == str(globex.id)

    def test_unaffiliated_user_cannot_switch(self, client: TestClient, acme, make_user, auth_headers):
        user = make_user("new@acme.com")

        response = client.post("/api/v1/company/switch", json={"join_code": "ACME0001"}, headers=auth_headers(user))

        assert response.status_code == 409
        assert response.json()["error"] == "not_affiliated"


class TestOrganizationTree:

    def test_tree_from_root(self, client: TestClient, acme: Company, make_company, make_user, auth_headers):
        west = make_company("Acme West", "WEST0001", parent=acme)
        make_company("West Depot", "DEPO0001", parent=west, organization_type="LOCATION")
        west_admin = make_user("boss@west.com", company=west, role="ADMIN")

        response = client.get("/api/v1/admin/organization-tree", headers=auth_headers(west_admin))

        assert response.status_code == 200
        body = response.json()
        assert body["tree"]["name"] == "Acme"
        assert body["tree"]["descendant_count"] == 2
        assert body["tree"]["children"][0]["user_count"] == 1
        assert body["tree"]["children"][0]["children"][0]["organization_type"] == "LOCATION"
        assert body["current_company_id"] == str(west.id)
        assert body["truncated"] is False

    def test_regular_user_denied(self, client: TestClient, member_user: User, auth_headers):
        response = client.get("/api/v1/admin/organization-tree", headers=auth_headers(member_user))

        assert response.status_code == 403
        assert response.json()["error"] == "permission_denied"


class TestChildCompany:

    def test_parent_type_rejected(self, client: TestClient, admin_user: User, auth_headers):
        response = client.post(
            "/api/v1/admin/child-company",
            json={"name": "Nested", "organization_type": "PARENT"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 400

    def test_child_audit_tagged_with_parent(self, client: TestClient, admin_user: User, acme: Company, auth_headers, db_session: Session):
        response = client.post(
            "/api/v1/admin/child-company",
            json={"name": "Acme Labs", "organization_type": "DIVISION", "description": "R&D"},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 201
        assert response.json()["parent_company_id"] == str(acme.id)
        [entry] = db_session.query(AuditLog).all()
        assert entry.action == "CHILD_COMPANY_CREATE"
        assert entry.company_id == acme.id

    def test_regular_user_denied(self, client: TestClient, member_user: User, auth_headers, db_session: Session):
        response = client.post(
            "/api/v1/admin/child-company",
            json={"name": "Rogue", "organization_type": "BRANCH"},
            headers=auth_headers(member_user),
        )

        assert response.status_code == 403
        assert db_session.query(Company).count() == 1


class TestCompanyProfile:

    def test_profile(self, client: TestClient, admin_user: User, member_user: User, auth_headers):
        response = client.get("/api/v1/admin/company", headers=auth_headers(admin_user))

        assert response.status_code == 200
        body = response.json()
        assert body["company"]["join_code"] == "ACME0001"
        assert body["user_count"] == 2
        assert body["child_count"] == 0

    def test_rename(self, client: TestClient, admin_user: User, auth_headers, db_session: Session, acme: Company):
        response = client.patch("/api/v1/admin/company", json={"name": " Acme Corp "}, headers=auth_headers(admin_user))

        assert response.status_code == 200
        assert response.json()["name"] == "Acme Corp"
        assert db_session.get(Company, acme.id).name == "Acme Corp"
