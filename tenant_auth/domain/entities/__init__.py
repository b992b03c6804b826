"""
Tenant Auth Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AuditSeverity,
    RefreshTokenStatus,
    UserRole,
    UserStatus,
)

# Export all entities
from .user import User
from .refresh_token import RefreshToken
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AuditSeverity",
    "RefreshTokenStatus",
    "UserRole",
    "UserStatus",
    # Entities
    "User",
    "RefreshToken",
    "AuditEvent",
]
