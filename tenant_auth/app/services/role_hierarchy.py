"""
Role Hierarchy

Closed, totally ordered role model:
USER < PROJECT_MANAGER < ADMIN < SUPER_ADMIN
"""

from typing import Iterable, Union

from tenant_auth.domain.entities import UserRole

RoleLike = Union[UserRole, str]


def to_role(role: RoleLike) -> UserRole:
    """Coerce a role name (as carried in JWT claims) to UserRole."""
    if isinstance(role, UserRole):
        return role
    return UserRole(role)


def satisfies(actual: RoleLike, required: RoleLike) -> bool:
    """True iff `actual` is at least as privileged as `required`."""
    return to_role(actual).rank >= to_role(required).rank


def satisfies_any(actual: RoleLike, required_roles: Iterable[RoleLike]) -> bool:
    return any(satisfies(actual, required) for required in required_roles)
