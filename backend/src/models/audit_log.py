"""AuditLog SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, Integer, ForeignKey, Index, CheckConstraint, Uuid, DateTime
from sqlalchemy.orm import relationship

from .base import Base, utcnow


AUDIT_ACTIONS = (
    "COMPANY_SWITCH", "COMPANY_CREATE", "COMPANY_JOIN",
    "CHILD_COMPANY_CREATE", "COMPANY_UPDATED",
    "USER_ROLE_CHANGED", "USER_REMOVED", "USER_INVITED",
    "CSV_EXPORT", "CSV_IMPORT", "CREATE_ITEM", "UPDATE_QUANTITY", "UPDATED",
)


class AuditLog(Base):
    """AuditLog model for the immutable activity trail.

    Records tenant boundary crossings and mutating actions. company_id is the
    tenant context at the time of the action. Entries are append-only and
    should never be updated or deleted.
    """
    __tablename__ = "audit_log"
    __table_args__ = (
        CheckConstraint(
            "action IN (" + ", ".join(f"'{action}'" for action in AUDIT_ACTIONS) + ")",
            name="ck_audit_log_action"
        ),
        Index("ix_audit_log_user_id", "user_id"),
        Index("ix_audit_log_company_id_created_at", "company_id", "created_at"),
        Index("ix_audit_log_item_id_company_id", "item_id", "company_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    action = Column(Text, nullable=False)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)
    company_id = Column(Uuid, ForeignKey("company.id", ondelete="RESTRICT"), nullable=False)
    item_id = Column(Uuid, nullable=True)
    item_name = Column(Text, nullable=True)
    quantity_change = Column(Integer, nullable=True)
    previous_quantity = Column(Integer, nullable=True)
    new_quantity = Column(Integer, nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    user = relationship("User")
    company = relationship("Company")
