"""
Authentication Use Cases

All authentication-related business logic.
"""

from .login_use_case import LoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .validate_token_use_case import ValidateTokenUseCase
from .change_password_use_case import ChangePasswordUseCase
from .dtos import (
    ChangePasswordCommand,
    ChangePasswordResponse,
    ClaimsInfo,
    LoginCommand,
    LogoutResponse,
    TokenResponse,
    UserInfo,
    ValidateTokenResponse,
)

__all__ = [
    # Use Cases
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "ValidateTokenUseCase",
    "ChangePasswordUseCase",
    # DTOs - Commands
    "LoginCommand",
    "ChangePasswordCommand",
    # DTOs - Responses
    "TokenResponse",
    "ValidateTokenResponse",
    "LogoutResponse",
    "ChangePasswordResponse",
    # DTOs - Nested Models
    "UserInfo",
    "ClaimsInfo",
]
