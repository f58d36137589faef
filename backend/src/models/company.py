"""Company model - tenant node of the organization hierarchy"""

import re
import uuid

from sqlalchemy import Column, String, Text, ForeignKey, CheckConstraint, Index, Uuid, DateTime
from sqlalchemy.orm import validates, relationship

from .base import Base, utcnow


class Company(Base):
    """
    Company model - Root entity for multi-tenant isolation.

    Each company is a tenant with isolated inventory. Companies form trees via
    the self-referential parent_company_id column (adjacency list); no ORM
    relationship is declared for it so that trees are only ever rebuilt by
    explicit, bounded queries.

    join_code is the credential for crossing into this tenant and is globally
    unique at the database level (uq_company_join_code).
    """
    __tablename__ = "company"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    join_code = Column(String(8), nullable=False)
    organization_type = Column(Text, nullable=False, default="PARENT", server_default="PARENT")
    parent_company_id = Column(
        Uuid,
        ForeignKey("company.id", ondelete="RESTRICT"),
        nullable=True
    )
    location = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    users = relationship("User", back_populates="company")

    __table_args__ = (
        CheckConstraint(
            "organization_type IN ('PARENT', 'SUBSIDIARY', 'BRANCH', 'LOCATION', 'DIVISION')",
            name="ck_company_organization_type"
        ),
        CheckConstraint(
            "parent_company_id IS NULL OR parent_company_id <> id",
            name="ck_company_not_own_parent"
        ),
        Index("uq_company_join_code", "join_code", unique=True),
        Index("ix_company_parent_company_id", "parent_company_id"),
    )

    @validates('join_code')
    def validate_join_code(self, key, value):
        """
        Ensure the join code is 8 characters of [A-Z0-9].

        Raises:
            ValueError: If the code doesn't match the pattern
        """
        if not value or not re.match(r'^[A-Z0-9]{8}$', value):
            raise ValueError("Join code must be 8 characters of A-Z and 0-9")
        return value

    @validates('name')
    def validate_name(self, key, value):
        """
        Ensure company name is not empty and within length limits.

        Raises:
            ValueError: If name is empty/whitespace or exceeds 100 characters
        """
        if not value or len(value.strip()) == 0:
            raise ValueError("Company name cannot be empty")
        if len(value.strip()) > 100:
            raise ValueError("Company name cannot exceed 100 characters")
        return value.strip()

    def __repr__(self):
        return f"<Company(id={self.id}, join_code='{self.join_code}', name='{self.name}')>"
