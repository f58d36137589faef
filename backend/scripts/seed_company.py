#!/usr/bin/env python
"""Seed script to create the tables and a first company with its admin.

Run once during initial setup. The admin can then share the printed join code
or create child organizations through the API.

Usage:
    python backend/scripts/seed_company.py

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    PASSWORD_PEPPER: Password hashing pepper (required)
    COMPANY_NAME: Name of the root company (default: GearBin HQ)
    ADMIN_EMAIL: Email for admin user (default: admin@example.com)
    ADMIN_PASSWORD: Password for admin user (default: AdminP@ss123)
    ADMIN_NAME: Display name for admin user (default: System Administrator)
"""

import os
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth.password import hash_password
from config import get_settings
from dependencies import build_tenancy_services
from domain.tenancy import Affiliation, ConflictError, TenancyError, UserRole
from models import Base, User


def seed_company(db: Session, company_name: str, email: str, password: str, name: str) -> Affiliation:
    """Register an admin and a root company for them in the session; the caller commits.

    Raises:
        ConflictError: A user with this email already exists
        TenancyValidationError: Empty company name
    """
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")

    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError(f"User with email {email} already exists")

    user = User(
        email=email,
        name=name.strip(),
        password_hash=hash_password(password),
        role=UserRole.USER.value,
        status="ACTIVE",
    )
    db.add(user)
    db.flush()

    services = build_tenancy_services(db, get_settings())
    return services.boundary.signup_create(user.id, company_name)


def main():
    """Create tables, the root company and its admin."""
    from database import engine, get_db_session

    Base.metadata.create_all(engine)

    try:
        with get_db_session() as session:
            affiliation = seed_company(
                session,
                company_name=os.getenv("COMPANY_NAME", "GearBin HQ"),
                email=os.getenv("ADMIN_EMAIL", "admin@example.com"),
                password=os.getenv("ADMIN_PASSWORD", "AdminP@ss123"),
                name=os.getenv("ADMIN_NAME", "System Administrator"),
            )
    except (TenancyError, ValueError, SQLAlchemyError) as e:
        print(f"ERROR: Failed to seed company: {e}")
        sys.exit(1)

    print("SUCCESS: Company and admin created")
    print(f"  Company:   {affiliation.company.name} ({affiliation.company.id})")
    print(f"  Join code: {affiliation.company.join_code}")
    print(f"  Admin:     {affiliation.user.email}")
    print(f"  Role:      {affiliation.user.role.value}")


if __name__ == "__main__":
    main()
