"""Member administration endpoints (ADMIN only).

Admins manage the members of their current company:
- Change a member's role
- Remove a member (they become unaffiliated)
- Prepare an invitation (the company's join code plus instructions)

A target user outside the admin's company is reported as 404, exactly like a
user that does not exist. All mutations append an audit entry.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from auth.dependencies import CurrentAdmin
from database import get_db
from dependencies import TenancyServices, get_tenancy_services
from .schemas import InviteResponse, MemberChangeResponse, MemberResponse, UserInvite, UserRoleUpdate


router = APIRouter(prefix="/admin/users", tags=["User Management"])


@router.patch("/{user_id}", response_model=MemberChangeResponse)
def update_user_role(
    user_id: UUID,
    data: UserRoleUpdate,
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
    services: TenancyServices = Depends(get_tenancy_services),
) -> MemberChangeResponse:
    """Change a member's role. Admins cannot demote themselves (409)."""
    user = services.membership.change_user_role(admin.id, user_id, data.role)
    db.commit()
    return MemberChangeResponse(
        message=f"User role updated to {user.role.value}",
        user=MemberResponse.model_validate(user),
    )


@router.delete("/{user_id}", response_model=MemberChangeResponse)
def remove_user(
    user_id: UUID,
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
    services: TenancyServices = Depends(get_tenancy_services),
) -> MemberChangeResponse:
    """Remove a member from the company. Admins cannot remove themselves (409)."""
    user = services.membership.remove_user(admin.id, user_id)
    db.commit()
    return MemberChangeResponse(
        message="User removed from company",
        user=MemberResponse.model_validate(user),
    )


@router.post("/invite", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
def invite_user(
    data: UserInvite,
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
    services: TenancyServices = Depends(get_tenancy_services),
) -> InviteResponse:
    """Return the join code to share with the invitee.

    409 if a user with that email already belongs to this or another company.
    """
    invitation = services.membership.invite_user(admin.id, data.email)
    db.commit()
    return InviteResponse(
        message="Invitation details generated successfully",
        email=invitation.email,
        join_code=invitation.company.join_code,
        company_name=invitation.company.name,
        instructions=invitation.instructions,
    )
