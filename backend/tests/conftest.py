"""Pytest fixtures for GearBin backend tests.

Provides reusable test fixtures for:
- In-memory tenancy services for unit tests
- SQLite database session (fresh schema per test)
- Companies and users with different roles (ADMIN, USER)
- Test clients and bearer headers

Usage:
    def test_admin_endpoint(client, admin_user, auth_headers):
        response = client.get("/api/v1/admin/company", headers=auth_headers(admin_user))
        assert response.status_code == 200
"""

import sys
import os
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-key-32-chars-long")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Callable, Generator, Optional

from models import Base, Company, User
from auth.password import hash_password
from auth.jwt import create_access_token
from database import build_engine, get_db as database_get_db
from fixtures.memory_store import MemoryTenancy


TEST_PASSWORD = "GearBinP@ss1"


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Argon2id is deliberately slow; hash the shared test password once."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def tenancy() -> MemoryTenancy:
    """Tenancy services over fresh in-memory stores."""
    return MemoryTenancy()


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite database per test.

    StaticPool keeps the single connection alive so the TestClient thread
    sees the same database; savepoints are enabled by build_engine.
    """
    engine = build_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_company(db_session: Session) -> Callable[..., Company]:
    def _make(name: str, join_code: str, parent: Optional[Company] = None, organization_type: Optional[str] = None):
        company = Company(
            name=name,
            join_code=join_code,
            organization_type=organization_type or ("PARENT" if parent is None else "BRANCH"),
            parent_company_id=parent.id if parent else None,
        )
        db_session.add(company)
        db_session.commit()
        db_session.refresh(company)
        return company

    return _make


@pytest.fixture
def make_user(db_session: Session, password_hash: str) -> Callable[..., User]:
    def _make(email: str, company: Optional[Company] = None, role: str = "USER", name: Optional[str] = None):
        user = User(
            email=email,
            name=name or email.split("@")[0].title(),
            role=role,
            company_id=company.id if company else None,
            password_hash=password_hash,
            status="ACTIVE",
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def acme(make_company) -> Company:
    return make_company("Acme", "ACME0001")


@pytest.fixture
def admin_user(make_user, acme: Company) -> User:
    return make_user("admin@acme.com", company=acme, role="ADMIN", name="Admin User")


@pytest.fixture
def member_user(make_user, acme: Company) -> User:
    return make_user("member@acme.com", company=acme, role="USER", name="Member User")


@pytest.fixture
def auth_headers() -> Callable[[User], dict]:
    """Bearer header for a user; claims mirror the user's current row."""

    def _headers(user: User) -> dict:
        token = create_access_token(
            user_id=user.id,
            company_id=user.company_id,
            role=user.role,
            email=user.email,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Unauthenticated test client bound to the test database."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[database_get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()
