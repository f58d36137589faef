"""Prometheus metrics for GearBin.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter

# Tenant boundary transitions (create, join, switch, child creation)
tenancy_transitions_total = Counter(
    "gearbin_tenancy_transitions_total",
    "Total number of tenant boundary operations",
    ["action", "outcome"]  # outcome: success|error code
)

# Join code allocation
join_code_collisions_total = Counter(
    "gearbin_join_code_collisions_total",
    "Join code candidates rejected because they were already taken",
    ["stage"]  # stage: precheck|insert
)

# Hierarchy corruption detected during an upward walk
hierarchy_integrity_failures_total = Counter(
    "gearbin_hierarchy_integrity_failures_total",
    "Upward hierarchy walks aborted due to a cycle or depth bound",
)

# Membership administration
membership_changes_total = Counter(
    "gearbin_membership_changes_total",
    "Role changes, removals and invitations performed by admins",
    ["action"]
)
