"""Error taxonomy for the tenancy core.

Every error carries a stable machine code and a message the UI can show
verbatim. The API layer maps each category to a transport status (see
main.py exception handlers); nothing here knows about HTTP.
"""

from typing import Optional


class TenancyError(Exception):
    """Base class for all tenancy errors surfaced to callers."""
    code = "tenancy_error"
    default_message = "Tenancy operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(TenancyError):
    """No valid caller identity."""
    code = "unauthenticated"
    default_message = "Unauthorized"


class PermissionDeniedError(TenancyError):
    """Caller lacks the required role or acts outside their own tenant."""
    code = "permission_denied"
    default_message = "Admin access required"


class TenancyValidationError(TenancyError):
    """Malformed input."""
    code = "validation_error"
    default_message = "Invalid input"


class NotFoundError(TenancyError):
    """Record missing or outside the caller's tenant scope.

    Both cases raise the same error so that lookups cannot be used to probe
    other tenants.
    """
    code = "not_found"
    default_message = "Not found"


class InvalidJoinCodeError(NotFoundError):
    """No company uses the supplied join code."""
    code = "invalid_join_code"
    default_message = "Invalid join code"


class ConflictError(TenancyError):
    """State machine violation."""
    code = "conflict"
    default_message = "Operation conflicts with current state"


class AlreadyAffiliatedError(ConflictError):
    code = "already_affiliated"
    default_message = "User already belongs to a company"


class NotAffiliatedError(ConflictError):
    code = "not_affiliated"
    default_message = "You do not belong to a company yet. Create or join one first."


class AlreadyMemberError(ConflictError):
    code = "already_member"
    default_message = "You are already in this company"


class HierarchyIntegrityError(TenancyError):
    """The parent chain is corrupted (cycle or depth bound exceeded).

    Fatal to the requested operation and never retried automatically.
    """
    code = "integrity_error"
    default_message = "Organization hierarchy is corrupted"


class JoinCodeExhaustedError(TenancyError):
    """No free join code was found within the retry bound."""
    code = "join_code_exhausted"
    default_message = "Could not allocate a unique join code. Please try again."


class DuplicateJoinCodeError(Exception):
    """Raised by stores when an insert violates join code uniqueness.

    Internal signal: the identity directory catches it and retries with a new
    candidate, so callers never see it.
    """

    def __init__(self, join_code: str):
        self.join_code = join_code
        super().__init__(f"Join code already in use: {join_code}")
