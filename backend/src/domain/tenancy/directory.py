"""Identity Directory: company lookup and join code allocation.

Join codes are 8 characters drawn uniformly from [A-Z0-9]. A candidate is
checked against the store before use, and the store's UNIQUE constraint is the
final arbiter: when two requests race for the same code the losing insert
raises DuplicateJoinCodeError and allocation starts over with a new candidate.
Both loops are bounded so that a misbehaving generator cannot spin forever.
"""

import logging
import re
import secrets
import string
from typing import Callable, Optional
from uuid import UUID

from observability.metrics import join_code_collisions_total

from .errors import (
    DuplicateJoinCodeError,
    InvalidJoinCodeError,
    JoinCodeExhaustedError,
    NotFoundError,
    TenancyValidationError,
)
from .models import Company, OrganizationType
from .ports import CompanyStorePort

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits
JOIN_CODE_LENGTH = 8
JOIN_CODE_MAX_ATTEMPTS = 32

_JOIN_CODE_PATTERN = re.compile(r"^[A-Za-z0-9]{%d}$" % JOIN_CODE_LENGTH)


def random_join_code(length: int = JOIN_CODE_LENGTH) -> str:
    """Draw a join code uniformly from JOIN_CODE_ALPHABET."""
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def normalize_join_code(raw: Optional[str]) -> str:
    """Trim and upper-case a caller-supplied join code.

    Raises:
        TenancyValidationError: If the code is empty, has the wrong length or
            contains characters outside [A-Z0-9]
    """
    if raw is None or not raw.strip():
        raise TenancyValidationError("Join code is required")

    code = raw.strip()
    # ASCII check before upper(): Unicode case mapping can change the length
    if not _JOIN_CODE_PATTERN.fullmatch(code):
        raise TenancyValidationError("Invalid join code")
    return code.upper()


class IdentityDirectory:
    """Company lookup by id or join code, and unique join code generation.

    Args:
        companies: Company persistence port
        max_attempts: Bound on draw-and-check and insert retries
        candidate_factory: Source of join code candidates (defaults to a
            uniform random draw; tests inject deterministic sequences)
    """

    def __init__(
        self,
        companies: CompanyStorePort,
        max_attempts: int = JOIN_CODE_MAX_ATTEMPTS,
        candidate_factory: Optional[Callable[[], str]] = None,
    ):
        self.companies = companies
        self.max_attempts = max_attempts
        self._candidate_factory = candidate_factory or random_join_code

    def find_company_by_id(self, company_id: UUID) -> Company:
        company = self.companies.get_company(company_id)
        if company is None:
            raise NotFoundError("Company not found")
        return company

    def find_company_by_join_code(self, join_code: str) -> Company:
        """Resolve a join code to its company.

        The code is normalized first, so lower-case or padded input works.

        Raises:
            TenancyValidationError: Malformed code
            InvalidJoinCodeError: No company uses this code
        """
        code = normalize_join_code(join_code)
        company = self.companies.get_company_by_join_code(code)
        if company is None:
            raise InvalidJoinCodeError()
        return company

    def generate_unique_join_code(self) -> str:
        """Draw candidates until one is not used by any company.

        Raises:
            JoinCodeExhaustedError: If max_attempts candidates were all taken
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self._candidate_factory()
            if not self.companies.join_code_exists(candidate):
                return candidate

            join_code_collisions_total.labels(stage="precheck").inc()
            logger.warning(
                "Join code candidate already taken, drawing again",
                extra={"attempt": attempt},
            )

        raise JoinCodeExhaustedError()

    def register_company(
        self,
        name: str,
        organization_type: OrganizationType,
        parent_company_id: Optional[UUID] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Company:
        """Insert a company under a freshly allocated join code.

        A concurrent writer may claim the same code between the existence check
        and the insert; the store rejects the loser with DuplicateJoinCodeError
        and allocation is retried rather than surfaced.

        Raises:
            JoinCodeExhaustedError: If every retry lost the race
        """
        for attempt in range(1, self.max_attempts + 1):
            join_code = self.generate_unique_join_code()
            try:
                company = self.companies.insert_company(
                    name=name,
                    join_code=join_code,
                    organization_type=organization_type,
                    parent_company_id=parent_company_id,
                    location=location,
                    description=description,
                )
            except DuplicateJoinCodeError:
                join_code_collisions_total.labels(stage="insert").inc()
                logger.warning(
                    "Join code claimed by a concurrent insert, retrying",
                    extra={"attempt": attempt},
                )
                continue

            logger.info(
                f"Registered company '{company.name}'",
                extra={"company_id": company.id},
            )
            return company

        raise JoinCodeExhaustedError()
