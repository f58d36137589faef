"""Health check utilities for GearBin.

The tenancy core has a single infrastructure dependency, the relational
store, so health is connectivity plus presence of the tenancy tables.
"""

import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .logging_config import get_logger

logger = get_logger(__name__)

TENANCY_TABLES = ("company", '"user"', "audit_log")


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def check_database_health(db: Session) -> ComponentHealth:
    """Check database connectivity with a trivial round trip."""
    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000

        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Database connection OK",
            latency_ms=round(latency_ms, 2)
        )
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message="Database unreachable"
        )


def check_tenancy_schema(db: Session) -> ComponentHealth:
    """Check that the company, user and audit_log tables are queryable.

    A reachable database without the tables (migrations not applied) is
    reported as DEGRADED rather than UNHEALTHY.
    """
    missing = []
    for table in TENANCY_TABLES:
        try:
            with db.begin_nested():
                db.execute(text(f"SELECT 1 FROM {table} LIMIT 1"))
        except SQLAlchemyError:
            missing.append(table.strip('"'))

    if missing:
        logger.warning(f"Tenancy tables missing: {', '.join(missing)}")
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message=f"Missing tables: {', '.join(missing)}"
        )

    return ComponentHealth(status=HealthStatus.HEALTHY, message="Tenancy schema OK")


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Determine overall health from component statuses."""
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY

    if any(c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY

    return HealthStatus.DEGRADED
