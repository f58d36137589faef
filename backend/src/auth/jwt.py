"""JWT token generation and validation

Access tokens identify the caller to the tenancy core.

JWT Token Claims Structure:
===========================

- sub: User ID as UUID string
- company_id: Current company (tenant) ID as UUID string, or null while the
  user is unaffiliated
- role: "ADMIN" | "USER"
- email: User's email address
- iat / exp: Issued-at and expiry Unix timestamps

company_id and role are informational (logging, UI). Authorization always
re-reads the user row, because a switch or a role change makes older tokens
stale without invalidating them.

Security Properties:
- Algorithm: HS256 (HMAC-SHA256 symmetric signing)
- Secret: JWT_SECRET environment variable
- Stateless validation of the signature; tenancy state comes from the database
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from uuid import UUID
import jwt

from config import get_settings


def _get_jwt_secret() -> str:
    """Get JWT_SECRET from settings.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    secret = get_settings().JWT_SECRET
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def _get_jwt_expiry_minutes() -> int:
    return get_settings().JWT_EXPIRY_MINUTES


def create_access_token(
    user_id: UUID,
    company_id: Optional[UUID],
    role: str,
    email: str
) -> str:
    """Create a JWT access token for an authenticated user.

    Args:
        user_id: User's UUID
        company_id: Current company UUID (None while unaffiliated)
        role: User's role (ADMIN, USER)
        email: User's email address

    Returns:
        str: Signed JWT token
    """
    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=_get_jwt_expiry_minutes())

    payload = {
        'sub': str(user_id),  # Subject: user ID
        'company_id': str(company_id) if company_id else None,
        'role': role,
        'email': email,
        'iat': int(now.timestamp()),  # Issued at
        'exp': int(expiration.timestamp())  # Expiration
    }

    return jwt.encode(payload, _get_jwt_secret(), algorithm='HS256')


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
        ValueError: If JWT_SECRET is not set
    """
    return jwt.decode(token, _get_jwt_secret(), algorithms=['HS256'])
