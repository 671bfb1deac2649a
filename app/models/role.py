"""Principal roles for role-based access control."""

from enum import Enum as PyEnum


class Role(str, PyEnum):
    """
    Roles a principal can hold.

    - OPERATOR - platform support/superuser. Lives in the operator area and
      never sees tenant dashboards.
    - ADMINISTRATOR - tenant root created at registration. Manages the team.
    - MANAGER - sales, customers and finance
    - SALESPERSON - point of sale and customer records
    - FINANCE - transactions and reports
    - VIEWER - read-only access
    - ADMIN, USER - legacy roles kept for existing accounts
    """

    OPERATOR = "operator"
    ADMINISTRATOR = "administrator"
    MANAGER = "manager"
    SALESPERSON = "salesperson"
    FINANCE = "finance"
    VIEWER = "viewer"
    ADMIN = "admin"
    USER = "user"


# Roles an administrator may hand out to team members
TEAM_ASSIGNABLE_ROLES = frozenset(role for role in Role if role is not Role.OPERATOR)
