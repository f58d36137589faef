"""Pydantic schemas for audit log endpoints.

Audit logs are read-only through the API (no create/update/delete operations).
"""

from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from domain.tenancy.models import AuditAction


class AuditLogResponse(BaseModel):
    """Response schema for audit log entries."""
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "action": "COMPANY_SWITCH",
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "company_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "item_id": None,
                "item_name": "Company Switch",
                "quantity_change": None,
                "previous_quantity": None,
                "new_quantity": None,
                "note": "Switched to company: Acme West",
                "created_at": "2025-01-04T12:00:00Z"
            }
        },
    )

    id: UUID = Field(..., description="Audit log entry unique identifier")
    action: AuditAction = Field(..., description="Event action (COMPANY_SWITCH, UPDATE_QUANTITY, etc.)")
    user_id: UUID = Field(..., description="User who performed the action")
    company_id: UUID = Field(..., description="Tenant context at the time of the action")
    item_id: Optional[UUID] = Field(None, description="Inventory item affected, if any")
    item_name: Optional[str] = Field(None, description="Display label of the affected item")
    quantity_change: Optional[int] = None
    previous_quantity: Optional[int] = None
    new_quantity: Optional[int] = None
    note: Optional[str] = None
    created_at: datetime = Field(..., description="Event timestamp")


class AuditLogListResponse(BaseModel):
    """Response schema for audit log queries, with pagination metadata."""
    entries: list[AuditLogResponse] = Field(..., description="List of audit log entries")
    total: int = Field(..., description="Total number of entries matching filters")
    page: int = Field(..., description="Current page number")
    per_page: int = Field(..., description="Entries per page")


class ItemHistoryResponse(BaseModel):
    """History of one inventory item inside the caller's company."""
    item_id: UUID
    entries: list[AuditLogResponse]
