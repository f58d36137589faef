"""SQLAlchemy Models for GearBin"""

from .base import Base
from .company import Company
from .user import User
from .audit_log import AuditLog, AUDIT_ACTIONS

__all__ = [
    "Base",
    "Company",
    "User",
    "AuditLog",
    "AUDIT_ACTIONS",
]
