"""FastAPI dependencies for authentication and authorization.

This module provides dependency injection functions for:
- Extracting and validating JWT tokens from requests
- Loading the current authenticated user
- Enforcing role-based access control (RBAC)

The token only proves who the caller is. Current company and role are read
from the user row on every request, so a token issued before a company switch
or a role change never carries stale tenancy.

Usage:
    @router.get("/admin/company")
    def get_company(admin: User = Depends(get_current_admin)):
        ...
"""

from typing import Callable, Annotated
from uuid import UUID
import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import jwt

from database import get_db
from domain.tenancy.errors import PermissionDeniedError, UnauthenticatedError
from models.user import User
from .jwt import decode_token
from .roles import UserRole, has_permission

logger = logging.getLogger(__name__)

# auto_error=False so a missing header maps to the same 401 body as a bad token
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Extract and validate JWT token, returning the authenticated user.

    This dependency:
    1. Extracts Bearer token from Authorization header
    2. Validates token signature and expiration
    3. Loads user from database
    4. Checks user is ACTIVE (not DISABLED)

    Raises:
        UnauthenticatedError: If token is missing, invalid, expired, the user
            no longer exists or the account is disabled
    """
    if credentials is None:
        raise UnauthenticatedError()

    try:
        payload = decode_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token has expired")
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as e:
        logger.info(f"Rejected bearer token: {e}")
        raise UnauthenticatedError("Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthenticatedError()

    if user.status != "ACTIVE":
        raise UnauthenticatedError("Account is disabled")

    return user


def require_role(required_role: UserRole) -> Callable:
    """Create a dependency that enforces role-based access control.

    The caller must belong to a company and hold a role that includes
    required_role (ADMIN includes USER).

    Raises:
        PermissionDeniedError: If the caller is unaffiliated or lacks the role
    """

    def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.company_id is None:
            raise PermissionDeniedError("You must belong to a company")

        if not has_permission(UserRole(current_user.role), required_role):
            if required_role == UserRole.ADMIN:
                raise PermissionDeniedError()
            raise PermissionDeniedError(f"Insufficient permissions. Required role: {required_role.value}")

        return current_user

    return role_dependency


def get_current_admin(current_user: User = Depends(require_role(UserRole.ADMIN))) -> User:
    """Convenience dependency for ADMIN-only endpoints."""
    return current_user


def get_current_member(current_user: User = Depends(require_role(UserRole.USER))) -> User:
    """Convenience dependency for endpoints open to any affiliated user."""
    return current_user


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentMember = Annotated[User, Depends(get_current_member)]
CurrentAdmin = Annotated[User, Depends(get_current_admin)]
