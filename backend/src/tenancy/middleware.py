"""Middleware attaching the caller's claimed tenant to the request context.

The company_id claim is used for log correlation only. Authorization never
relies on it: dependencies re-read the user row, because the claim goes stale
as soon as the user switches company.
"""

from typing import Callable, Optional
from uuid import UUID

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import jwt

from auth.jwt import decode_token
from observability.request_id import set_company_id


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Attach the token's company_id to request.state and the log context.

    Missing or invalid tokens leave company_id as None; rejecting them is the
    job of get_current_user.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        company_id = self._claimed_company_id(request.headers.get("Authorization"))
        request.state.company_id = company_id
        set_company_id(company_id)
        return await call_next(request)

    @staticmethod
    def _claimed_company_id(auth_header: Optional[str]) -> Optional[UUID]:
        if not auth_header:
            return None

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None

        try:
            claim = decode_token(parts[1]).get("company_id")
            return UUID(claim) if claim else None
        except (jwt.InvalidTokenError, ValueError):
            return None
