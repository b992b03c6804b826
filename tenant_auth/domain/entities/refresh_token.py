"""
RefreshToken Entity

Server-side state of an opaque refresh token.
"""

from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from tenant_auth.domain.base import utc_now
from .enums import RefreshTokenStatus


class RefreshToken(SQLModel, table=True):
    """
    RefreshToken entity - one link of a rotating token chain.

    Business Rules:
    - Only the SHA-256 hash of the token is stored
    - Each successful refresh rotates the token: the presented record becomes
      rotated and a successor with the same family_id is created
    - rotated/revoked are terminal; expiry is checked at read time
    - Rows are deleted only by retention sweeps
    """

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    token_hash: str = Field(max_length=64, unique=True, index=True)  # SHA-256 hex

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    tenant_id: str = Field(max_length=50, nullable=False, index=True)

    # Lineage: every rotation of one login shares family_id
    family_id: UUID = Field(default_factory=uuid4, index=True)
    replaced_by_id: Optional[UUID] = Field(default=None)

    status: RefreshTokenStatus = Field(default=RefreshTokenStatus.active)
    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revocation_reason: Optional[str] = Field(default=None, max_length=255)

    device_info: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=45)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_refresh_token_expires_at", "expires_at"),
        Index("idx_refresh_token_user_tenant", "user_id", "tenant_id"),
        Index("idx_refresh_token_status", "status"),
    )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def audit_ref(self) -> Tuple[str, str]:
        return "refresh_token", str(self.id)
