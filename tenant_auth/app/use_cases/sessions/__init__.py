"""
Session Use Cases

Refresh-token revocation and retention.
"""

from .revoke_sessions_use_case import RevokeSessionsUseCase
from .sweep_refresh_tokens_use_case import SweepRefreshTokensUseCase, SweepResponse

__all__ = [
    "RevokeSessionsUseCase",
    "SweepRefreshTokensUseCase",
    "SweepResponse",
]
