"""Audit Trail: append-only log of boundary-crossing and mutating actions.

Besides its compliance role the trail is load-bearing for access control: a
user's company membership is a single current pointer, so the trail is the only
durable record of which companies they belonged to before.

Entries are written through the caller's transaction (write, then the caller
commits), never retried and never deduplicated here.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from .errors import TenancyValidationError
from .models import AuditAction, AuditEntry
from .ports import AuditStorePort

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class AuditTrail:
    """Append and read audit entries."""

    def __init__(self, store: AuditStorePort):
        self.store = store

    def append(
        self,
        action: AuditAction,
        user_id: UUID,
        company_id: UUID,
        item_id: Optional[UUID] = None,
        item_name: Optional[str] = None,
        quantity_change: Optional[int] = None,
        previous_quantity: Optional[int] = None,
        new_quantity: Optional[int] = None,
        note: Optional[str] = None,
    ) -> AuditEntry:
        """Append one entry. It becomes durable when the caller commits."""
        entry = self.store.insert_entry(AuditEntry(
            action=AuditAction(action),
            user_id=user_id,
            company_id=company_id,
            item_id=item_id,
            item_name=item_name,
            quantity_change=quantity_change,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            note=note,
        ))
        logger.debug(
            f"Audit entry {entry.action.value}",
            extra={"user_id": user_id, "company_id": company_id},
        )
        return entry

    def record_quantity_change(
        self,
        user_id: UUID,
        company_id: UUID,
        item_id: UUID,
        item_name: str,
        quantity_change: int,
        previous_quantity: int,
        new_quantity: int,
        note: Optional[str] = None,
    ) -> AuditEntry:
        """Append an UPDATE_QUANTITY entry.

        Raises:
            TenancyValidationError: If new_quantity != previous_quantity +
                quantity_change, or a quantity is negative
        """
        if previous_quantity < 0 or new_quantity < 0:
            raise TenancyValidationError("Quantities cannot be negative")
        if previous_quantity + quantity_change != new_quantity:
            raise TenancyValidationError("Quantity change does not match previous and new quantity")

        return self.append(
            action=AuditAction.UPDATE_QUANTITY,
            user_id=user_id,
            company_id=company_id,
            item_id=item_id,
            item_name=item_name,
            quantity_change=quantity_change,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            note=note,
        )

    def query_by_user(self, user_id: UUID) -> list[UUID]:
        """Distinct company ids referenced by the user's entries."""
        return self.store.distinct_company_ids_for_user(user_id)

    def query_by_item(self, item_id: UUID, company_id: UUID) -> list[AuditEntry]:
        """Entries for an item within one company, newest first.

        Entries recorded under another company are invisible, exactly as if
        they did not exist.
        """
        return self.store.entries_for_item(item_id, company_id)

    def query_company(
        self,
        company_id: UUID,
        action: Optional[AuditAction] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[list[AuditEntry], int]:
        """Paginated entries of one company, newest first."""
        if page < 1:
            raise TenancyValidationError("Page must be 1 or greater")
        if per_page < 1 or per_page > MAX_PAGE_SIZE:
            raise TenancyValidationError(f"per_page must be between 1 and {MAX_PAGE_SIZE}")

        return self.store.query_company(
            company_id=company_id,
            action=action,
            start=start,
            end=end,
            offset=(page - 1) * per_page,
            limit=per_page,
        )
