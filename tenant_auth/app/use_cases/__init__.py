"""
Use Cases

Organized into domain folders:
- auth/: Login, refresh, logout, token validation, password change
- sessions/: Session revocation and refresh-token retention
- audit/: Audit log queries
"""

from .auth import (
    ChangePasswordUseCase,
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    ValidateTokenUseCase,
)
from .sessions import (
    RevokeSessionsUseCase,
    SweepRefreshTokensUseCase,
)
from .audit import (
    GetAuditEventsUseCase,
)

__all__ = [
    # Auth
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "ValidateTokenUseCase",
    "ChangePasswordUseCase",
    # Sessions
    "RevokeSessionsUseCase",
    "SweepRefreshTokensUseCase",
    # Audit
    "GetAuditEventsUseCase",
]
