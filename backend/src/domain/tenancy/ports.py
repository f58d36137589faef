"""Persistence ports for the tenancy core (Hexagonal Architecture).

The core reaches the store only through these interfaces. Implementations must
enforce join code and email uniqueness as hard constraints; the services rely
on it to resolve check-then-act races between concurrent requests.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from .models import AuditAction, AuditEntry, Company, OrganizationType, User, UserRole


class CompanyStorePort(ABC):
    """Company lookup, insert and update."""

    @abstractmethod
    def get_company(self, company_id: UUID) -> Optional[Company]:
        pass

    @abstractmethod
    def get_company_by_join_code(self, join_code: str) -> Optional[Company]:
        pass

    @abstractmethod
    def join_code_exists(self, join_code: str) -> bool:
        pass

    @abstractmethod
    def insert_company(
        self,
        name: str,
        join_code: str,
        organization_type: OrganizationType,
        parent_company_id: Optional[UUID] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Company:
        """Insert a company.

        Raises:
            DuplicateJoinCodeError: If join_code is already taken. The failed
                insert must not poison the surrounding transaction.
        """
        pass

    @abstractmethod
    def update_company_name(self, company_id: UUID, name: str) -> Company:
        pass

    @abstractmethod
    def list_companies(self, company_ids: Iterable[UUID]) -> list[Company]:
        """Load existing companies by id; unknown ids are skipped."""
        pass

    @abstractmethod
    def list_children(self, parent_ids: Iterable[UUID]) -> list[Company]:
        """Direct children of any of the given parents."""
        pass

    @abstractmethod
    def count_users(self, company_ids: Iterable[UUID]) -> dict[UUID, int]:
        """Number of users currently affiliated with each company."""
        pass


class UserStorePort(ABC):
    """User lookup and affiliation updates."""

    @abstractmethod
    def get_user(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def list_company_users(self, company_id: UUID) -> list[User]:
        """Users currently affiliated with company_id, oldest first."""
        pass

    @abstractmethod
    def set_affiliation(self, user_id: UUID, company_id: Optional[UUID], role: UserRole) -> User:
        pass

    @abstractmethod
    def set_role(self, user_id: UUID, role: UserRole) -> User:
        pass


class AuditStorePort(ABC):
    """Append-only audit log storage."""

    @abstractmethod
    def insert_entry(self, entry: AuditEntry) -> AuditEntry:
        """Persist an entry and return it with id and created_at populated."""
        pass

    @abstractmethod
    def distinct_company_ids_for_user(self, user_id: UUID) -> list[UUID]:
        pass

    @abstractmethod
    def entries_for_item(self, item_id: UUID, company_id: UUID) -> list[AuditEntry]:
        """Entries for one item inside one company, newest first."""
        pass

    @abstractmethod
    def query_company(
        self,
        company_id: UUID,
        action: Optional[AuditAction] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[AuditEntry], int]:
        """Entries of one company, newest first, with the unpaginated total."""
        pass
