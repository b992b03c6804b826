"""
Authentication Use Case DTOs (Data Transfer Objects)

Command and Response classes for the auth use cases.
Responses serialize with camelCase keys on the wire.
"""

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Command DTOs
# ============================================================================


class LoginCommand(BaseModel):
    """Credentials presented for a tenant"""

    tenant_id: str
    email: str
    password: str


class ChangePasswordCommand(BaseModel):
    user_id: UUID
    tenant_id: str
    current_password: str
    new_password: str


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(CamelModel):
    """Authenticated user summary in token responses"""

    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    tenant_id: str


class TokenResponse(CamelModel):
    """Response for login and refresh"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    expires_at: datetime
    user: UserInfo

    @field_serializer("expires_at")
    def serialize_expires_at(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.isoformat()


class ClaimsInfo(CamelModel):
    user_id: str
    tenant_id: str
    role: str
    email: Optional[str] = None
    issued_at: int
    expires_at: int


class ValidateTokenResponse(CamelModel):
    valid: bool
    claims: Optional[ClaimsInfo] = None


class LogoutResponse(CamelModel):
    message: str
    revoked_count: int = 0


class ChangePasswordResponse(CamelModel):
    message: str
    revoked_sessions: int
