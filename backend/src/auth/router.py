"""Authentication endpoints for GearBin API

Provides endpoints for signup, login and retrieving current user information.
Signup hands the freshly registered user to the tenancy core, which either
creates their company or joins them to one by join code.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from dependencies import TenancyServices, get_tenancy_services
from domain.tenancy.errors import ConflictError, UnauthenticatedError
from domain.tenancy.models import UserRole
from models.company import Company
from models.user import User
from .schemas import (
    CompanySummary,
    LoginRequest,
    LoginResponse,
    MeResponse,
    SignupRequest,
    SignupResponse,
    UserResponse,
)
from .password import hash_password, verify_password
from .jwt import create_access_token, _get_jwt_expiry_minutes
from .dependencies import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP address from request (X-Forwarded-For first)."""
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()

    if request.client:
        return request.client.host

    return None


def _token_for(user: User) -> LoginResponse:
    access_token = create_access_token(
        user_id=user.id,
        company_id=user.company_id,
        role=user.role,
        email=user.email
    )
    return LoginResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=_get_jwt_expiry_minutes() * 60
    )


def _insert_user(db: Session, user: User) -> None:
    """Insert user inside a SAVEPOINT; a concurrent signup with the same email
    surfaces as ConflictError instead of a raw IntegrityError."""
    try:
        with db.begin_nested():
            db.add(user)
            db.flush()
    except IntegrityError as exc:
        if "email" in str(exc.orig):
            raise ConflictError("Email already registered") from exc
        raise


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    data: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
    services: TenancyServices = Depends(get_tenancy_services),
):
    """Register a user and create or join their company in one transaction.

    company_mode "create" makes the user ADMIN of a new company; "join" makes
    them USER of the company behind join_code. If the company step fails
    (e.g. unknown join code) nothing is persisted, including the user.

    Raises:
        ConflictError (409): Email already registered
        InvalidJoinCodeError (404): No company uses join_code
    """
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        name=data.name.strip(),
        password_hash=hash_password(data.password),
        role=UserRole.USER.value,
        status="ACTIVE",
    )
    _insert_user(db, user)

    if data.company_mode == "create":
        affiliation = services.boundary.signup_create(user.id, data.company_name)
    else:
        affiliation = services.boundary.signup_join(user.id, data.join_code)

    db.commit()
    db.refresh(user)
    logger.info(
        f"User signed up ({data.company_mode})",
        extra={"user_id": user.id, "company_id": affiliation.company.id}
    )

    token = _token_for(user)
    return SignupResponse(
        **token.model_dump(),
        user=UserResponse.model_validate(user),
        company=CompanySummary.model_validate(affiliation.company),
    )


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    """Authenticate user and return JWT access token.

    Failed attempts go to the application log only: the audit trail needs a
    tenant context, which an anonymous caller does not have.

    Raises:
        UnauthenticatedError (401): Invalid credentials or disabled account
    """
    email = credentials.email.lower()
    user = db.query(User).filter(User.email == email).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning(
            "Login failed: invalid credentials",
            extra={"client_ip": _get_client_ip(request)}
        )
        # Generic message to prevent enumeration
        raise UnauthenticatedError("Invalid email or password")

    if user.status == 'DISABLED':
        logger.warning("Login failed: account disabled", extra={"user_id": user.id})
        raise UnauthenticatedError("Account is disabled")

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    logger.info("Login succeeded", extra={"user_id": user.id, "company_id": user.company_id})
    return _token_for(user)


@router.get("/me", response_model=MeResponse)
def get_me(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Current user with their current company (null while unaffiliated)."""
    company = db.get(Company, current_user.company_id) if current_user.company_id else None
    return MeResponse(
        user=UserResponse.model_validate(current_user),
        company=CompanySummary.model_validate(company) if company else None,
    )
