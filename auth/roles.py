"""Roles carried in access tokens and the policies routes require."""

from enum import Enum


class Role(str, Enum):
    """Role claimed by an access token."""

    ADMIN = "admin"
    USER = "user"
    CUSTOMER = "customer"


class RolePolicy(str, Enum):
    """Role requirement attached to a route."""

    ADMIN = "admin"
    USER = "user"
    CUSTOMER = "customer"
    BOTH = "both"  # any known role


# Roles admitted by each policy. Admins may act as customers.
_ALLOWED_ROLES: dict[RolePolicy, frozenset[Role]] = {
    RolePolicy.ADMIN: frozenset({Role.ADMIN}),
    RolePolicy.USER: frozenset({Role.USER}),
    RolePolicy.CUSTOMER: frozenset({Role.CUSTOMER, Role.ADMIN}),
    RolePolicy.BOTH: frozenset({Role.ADMIN, Role.USER, Role.CUSTOMER}),
}


def parse_role(value: str | None) -> Role | None:
    """Return the Role for a claim value, or None if it is not a known role."""
    if value is None:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def policy_allows(policy: RolePolicy, actual_role: str | Role | None) -> bool:
    """
    Decide whether a token role satisfies a route policy.

    Args:
        policy: Policy required by the route
        actual_role: Role claim from the decoded token

    Returns:
        True if the role is admitted, False otherwise (including unknown roles)
    """
    role = actual_role if isinstance(actual_role, Role) else parse_role(actual_role)
    if role is None:
        return False
    return role in _ALLOWED_ROLES[policy]
