"""Per-request correlation context.

Holds the request ID and the caller's tenant (company) in ContextVars so every
log line emitted while serving a request can be correlated, including lines
from the tenancy core which never sees the request object.
"""

import uuid
from contextvars import ContextVar
from typing import Optional
from uuid import UUID

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
company_id_var: ContextVar[Optional[UUID]] = ContextVar("company_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Current request ID, or "no-request-id" outside a request."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_company_id() -> Optional[UUID]:
    """Company claimed by the current request's token, if any."""
    return company_id_var.get()


def set_company_id(company_id: Optional[UUID]) -> None:
    company_id_var.set(company_id)
