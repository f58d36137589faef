"""User SQLAlchemy model"""

import re
import uuid

from sqlalchemy import Column, Text, ForeignKey, CheckConstraint, UniqueConstraint, Uuid, DateTime
from sqlalchemy.orm import relationship, validates

from .base import Base, utcnow


class User(Base):
    """User model representing authenticated users in GearBin.

    A user belongs to at most one company at a time: company_id is the single
    current affiliation (NULL while unaffiliated). Earlier affiliations are only
    recoverable from the audit log. Passwords are hashed using Argon2id.
    """
    __tablename__ = "user"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid, ForeignKey("company.id", ondelete="SET NULL"), nullable=True)
    email = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default="USER", server_default="USER")
    password_hash = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="ACTIVE", server_default="ACTIVE")
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    company = relationship("Company", back_populates="users")

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "role IN ('ADMIN', 'USER')",
            name='ck_user_role'
        ),
        CheckConstraint(
            "status IN ('ACTIVE', 'DISABLED')",
            name='ck_user_status'
        ),
        UniqueConstraint('email', name='uq_user_email')
    )

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        if not re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', value):
            raise ValueError("Invalid email format")
        return value.lower()
