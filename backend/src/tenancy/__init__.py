"""Tenancy API module - company affiliation, hierarchy and tenant context.

The tenancy rules themselves live in domain.tenancy; this package exposes
them over HTTP and attaches the caller's tenant to the request context.
"""

from .middleware import TenantContextMiddleware

__all__ = [
    "TenantContextMiddleware",
]
