"""Observability module for GearBin.

Provides structured logging, request correlation, metrics and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    tenancy_transitions_total,
    join_code_collisions_total,
    hierarchy_integrity_failures_total,
    membership_changes_total,
)
from .request_id import get_request_id, set_request_id, get_company_id, set_company_id
from .health import (
    check_database_health,
    check_tenancy_schema,
    get_overall_health,
    HealthStatus,
    ComponentHealth,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "tenancy_transitions_total",
    "join_code_collisions_total",
    "hierarchy_integrity_failures_total",
    "membership_changes_total",
    "get_request_id",
    "set_request_id",
    "get_company_id",
    "set_company_id",
    "check_database_health",
    "check_tenancy_schema",
    "get_overall_health",
    "HealthStatus",
    "ComponentHealth",
]
