"""Audit log query endpoints.

All endpoints in this router are read-only. Audit logs are append-only and
cannot be created, updated, or deleted through the API.

Every query is scoped to the caller's current company; entries recorded under
another company are invisible, as if they did not exist.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from auth.dependencies import CurrentAdmin, CurrentMember
from dependencies import TenancyServices, get_tenancy_services
from domain.tenancy.models import AuditAction
from .schemas import AuditLogListResponse, AuditLogResponse, ItemHistoryResponse


router = APIRouter(prefix="/audit", tags=["Audit Logs"])


@router.get(
    "",
    response_model=AuditLogListResponse,
    summary="Query audit logs (ADMIN only)",
    description="Query the current company's audit log with filtering and pagination."
)
def query_audit_logs(
    admin: CurrentAdmin,
    services: TenancyServices = Depends(get_tenancy_services),
    action: Optional[AuditAction] = Query(
        None,
        description="Filter by action type (e.g., COMPANY_SWITCH, UPDATE_QUANTITY)",
    ),
    start_date: Optional[datetime] = Query(
        None,
        description="Filter by minimum created_at timestamp (ISO 8601)",
    ),
    end_date: Optional[datetime] = Query(
        None,
        description="Filter by maximum created_at timestamp (ISO 8601)",
    ),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(50, ge=1, le=100, description="Entries per page (max 100)"),
) -> AuditLogListResponse:
    """Query audit logs of the caller's company, newest first."""
    entries, total = services.audit_trail.query_company(
        company_id=admin.company_id,
        action=action,
        start=start_date,
        end=end_date,
        page=page,
        per_page=per_page,
    )
    return AuditLogListResponse(
        entries=[AuditLogResponse.model_validate(entry) for entry in entries],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/items/{item_id}",
    response_model=ItemHistoryResponse,
    summary="History of one inventory item",
)
def get_item_history(
    item_id: UUID,
    member: CurrentMember,
    services: TenancyServices = Depends(get_tenancy_services),
) -> ItemHistoryResponse:
    """Entries for item_id within the caller's current company, newest first."""
    entries = services.audit_trail.query_by_item(item_id, member.company_id)
    return ItemHistoryResponse(
        item_id=item_id,
        entries=[AuditLogResponse.model_validate(entry) for entry in entries],
    )
