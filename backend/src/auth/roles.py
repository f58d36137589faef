"""User roles and permission hierarchy for GearBin.

Role Hierarchy (descending permissions):
- ADMIN: Membership and role management, child organizations, company settings,
  organization tree and audit log queries
- USER: Inventory work inside the current company, company switching

Permission Matrix:
┌───────────────────────────┬───────┬──────┐
│ Action                    │ ADMIN │ USER │
├───────────────────────────┼───────┼──────┤
│ Manage Users / Invite     │   ✓   │      │
│ Create Child Organization │   ✓   │      │
│ View Organization Tree    │   ✓   │      │
│ Query Company Audit Log   │   ✓   │      │
│ Switch Company            │   ✓   │  ✓   │
│ View Item History         │   ✓   │  ✓   │
└───────────────────────────┴───────┴──────┘
"""

from domain.tenancy.models import UserRole


# Role hierarchy: Each role includes permissions of all roles below it
ROLE_HIERARCHY = {
    UserRole.ADMIN: {UserRole.ADMIN, UserRole.USER},
    UserRole.USER: {UserRole.USER},
}


def has_permission(user_role: UserRole, required_role: UserRole) -> bool:
    """Check if a user role has permission to perform an action requiring a specific role.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.USER)
        True
        >>> has_permission(UserRole.USER, UserRole.ADMIN)
        False
    """
    return required_role in ROLE_HIERARCHY.get(user_role, set())
