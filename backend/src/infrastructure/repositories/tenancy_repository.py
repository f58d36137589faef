"""Tenancy repositories: SQLAlchemy adapters for the tenancy persistence ports.

Rows are mapped to domain dataclasses on the way out so that services never
hold live ORM objects. All writes flush but never commit; the request that owns
the session commits once at the end.
"""

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.company import Company as CompanyModel
from models.user import User as UserModel
from models.audit_log import AuditLog as AuditLogModel
from domain.tenancy.errors import DuplicateJoinCodeError, NotFoundError
from domain.tenancy.models import (
    AuditAction,
    AuditEntry,
    Company,
    OrganizationType,
    User,
    UserRole,
)
from domain.tenancy.ports import AuditStorePort, CompanyStorePort, UserStorePort


def to_company(row: CompanyModel) -> Company:
    return Company(
        id=row.id,
        name=row.name,
        join_code=row.join_code,
        organization_type=OrganizationType(row.organization_type),
        parent_company_id=row.parent_company_id,
        location=row.location,
        description=row.description,
        created_at=row.created_at,
    )


def to_user(row: UserModel) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        role=UserRole(row.role),
        company_id=row.company_id,
        created_at=row.created_at,
    )


def to_audit_entry(row: AuditLogModel) -> AuditEntry:
    return AuditEntry(
        id=row.id,
        action=AuditAction(row.action),
        user_id=row.user_id,
        company_id=row.company_id,
        item_id=row.item_id,
        item_name=row.item_name,
        quantity_change=row.quantity_change,
        previous_quantity=row.previous_quantity,
        new_quantity=row.new_quantity,
        note=row.note,
        created_at=row.created_at,
    )


class CompanyRepository(CompanyStorePort):
    """Repository for company table operations."""

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_company(self, company_id: UUID) -> Optional[Company]:
        row = self.db.get(CompanyModel, company_id)
        return to_company(row) if row else None

    def get_company_by_join_code(self, join_code: str) -> Optional[Company]:
        row = self.db.execute(
            select(CompanyModel).where(CompanyModel.join_code == join_code)
        ).scalar_one_or_none()
        return to_company(row) if row else None

    def join_code_exists(self, join_code: str) -> bool:
        found = self.db.execute(
            select(CompanyModel.id).where(CompanyModel.join_code == join_code)
        ).first()
        return found is not None

    def insert_company(
        self,
        name: str,
        join_code: str,
        organization_type: OrganizationType,
        parent_company_id: Optional[UUID] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Company:
        """Insert a company inside a SAVEPOINT.

        A unique violation on join_code rolls back only the savepoint, leaving
        the rest of the request's transaction (e.g. a freshly registered user)
        intact, and surfaces as DuplicateJoinCodeError.
        """
        row = CompanyModel(
            name=name,
            join_code=join_code,
            organization_type=OrganizationType(organization_type).value,
            parent_company_id=parent_company_id,
            location=location,
            description=description,
        )
        try:
            with self.db.begin_nested():
                self.db.add(row)
                self.db.flush()
        except IntegrityError as exc:
            if "join_code" in str(exc.orig):
                raise DuplicateJoinCodeError(join_code) from exc
            raise

        return to_company(row)

    def update_company_name(self, company_id: UUID, name: str) -> Company:
        row = self.db.get(CompanyModel, company_id)
        if row is None:
            raise NotFoundError("Company not found")
        row.name = name
        self.db.flush()
        return to_company(row)

    def list_companies(self, company_ids: Iterable[UUID]) -> list[Company]:
        ids = list(company_ids)
        if not ids:
            return []
        rows = self.db.execute(
            select(CompanyModel).where(CompanyModel.id.in_(ids))
        ).scalars().all()
        return [to_company(row) for row in rows]

    def list_children(self, parent_ids: Iterable[UUID]) -> list[Company]:
        ids = list(parent_ids)
        if not ids:
            return []
        rows = self.db.execute(
            select(CompanyModel)
            .where(CompanyModel.parent_company_id.in_(ids))
            .order_by(CompanyModel.name)
        ).scalars().all()
        return [to_company(row) for row in rows]

    def count_users(self, company_ids: Iterable[UUID]) -> dict[UUID, int]:
        ids = list(company_ids)
        if not ids:
            return {}
        rows = self.db.execute(
            select(UserModel.company_id, func.count(UserModel.id))
            .where(UserModel.company_id.in_(ids))
            .group_by(UserModel.company_id)
        ).all()
        return {company_id: count for company_id, count in rows}


class UserRepository(UserStorePort):
    """Repository for user affiliation reads and updates."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: UUID) -> Optional[User]:
        row = self.db.get(UserModel, user_id)
        return to_user(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        row = self.db.execute(
            select(UserModel).where(UserModel.email == email.lower())
        ).scalar_one_or_none()
        return to_user(row) if row else None

    def list_company_users(self, company_id: UUID) -> list[User]:
        rows = self.db.execute(
            select(UserModel)
            .where(UserModel.company_id == company_id)
            .order_by(UserModel.created_at)
        ).scalars().all()
        return [to_user(row) for row in rows]

    def set_affiliation(self, user_id: UUID, company_id: Optional[UUID], role: UserRole) -> User:
        row = self._row(user_id)
        row.company_id = company_id
        row.role = UserRole(role).value
        self.db.flush()
        return to_user(row)

    def set_role(self, user_id: UUID, role: UserRole) -> User:
        row = self._row(user_id)
        row.role = UserRole(role).value
        self.db.flush()
        return to_user(row)

    def _row(self, user_id: UUID) -> UserModel:
        row = self.db.get(UserModel, user_id)
        if row is None:
            raise NotFoundError("User not found")
        return row


class AuditRepository(AuditStorePort):
    """Repository for the append-only audit_log table."""

    def __init__(self, db: Session):
        self.db = db

    def insert_entry(self, entry: AuditEntry) -> AuditEntry:
        row = AuditLogModel(
            action=AuditAction(entry.action).value,
            user_id=entry.user_id,
            company_id=entry.company_id,
            item_id=entry.item_id,
            item_name=entry.item_name,
            quantity_change=entry.quantity_change,
            previous_quantity=entry.previous_quantity,
            new_quantity=entry.new_quantity,
            note=entry.note,
        )
        self.db.add(row)
        self.db.flush()  # Get ID without committing transaction
        return to_audit_entry(row)

    def distinct_company_ids_for_user(self, user_id: UUID) -> list[UUID]:
        rows = self.db.execute(
            select(AuditLogModel.company_id)
            .where(AuditLogModel.user_id == user_id)
            .distinct()
        ).scalars().all()
        return list(rows)

    def entries_for_item(self, item_id: UUID, company_id: UUID) -> list[AuditEntry]:
        rows = self.db.execute(
            select(AuditLogModel)
            .where(
                and_(
                    AuditLogModel.item_id == item_id,
                    AuditLogModel.company_id == company_id
                )
            )
            .order_by(AuditLogModel.created_at.desc())
        ).scalars().all()
        return [to_audit_entry(row) for row in rows]

    def query_company(
        self,
        company_id: UUID,
        action: Optional[AuditAction] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[AuditEntry], int]:
        conditions = [AuditLogModel.company_id == company_id]
        if action:
            conditions.append(AuditLogModel.action == AuditAction(action).value)
        if start:
            conditions.append(AuditLogModel.created_at >= start)
        if end:
            conditions.append(AuditLogModel.created_at <= end)

        total = self.db.execute(
            select(func.count(AuditLogModel.id)).where(and_(*conditions))
        ).scalar_one()

        rows = self.db.execute(
            select(AuditLogModel)
            .where(and_(*conditions))
            .order_by(AuditLogModel.created_at.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return [to_audit_entry(row) for row in rows], total
