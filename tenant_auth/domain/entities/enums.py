"""
Tenant Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User account status"""

    active = "ACTIVE"
    inactive = "INACTIVE"
    suspended = "SUSPENDED"
    pending_verification = "PENDING_VERIFICATION"


class UserRole(str, Enum):
    """
    User role within a tenant.

    Declaration order is the privilege order, lowest first.
    """

    user = "USER"
    project_manager = "PROJECT_MANAGER"
    admin = "ADMIN"
    super_admin = "SUPER_ADMIN"

    @property
    def rank(self) -> int:
        return _ROLE_ORDER.index(self)


_ROLE_ORDER = list(UserRole)


class RefreshTokenStatus(str, Enum):
    """
    Persisted refresh-token state.

    EXPIRED is not stored; it is derived at read time from expires_at.
    """

    active = "active"
    rotated = "rotated"
    revoked = "revoked"


class AuditSeverity(str, Enum):
    """Audit event severity"""

    info = "info"
    high = "high"
