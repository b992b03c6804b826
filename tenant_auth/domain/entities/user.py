"""
User Entity

A person belonging to exactly one tenant.
"""

from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from tenant_auth.domain.base import utc_now
from .enums import UserRole, UserStatus


class User(SQLModel, table=True):
    """
    User entity - tenant-scoped identity.

    Business Rules:
    - Email is unique within a tenant, not globally
    - Password stored as bcrypt hash
    - Never physically deleted; status changes only
    - Provisioned outside this service
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: str = Field(max_length=50, nullable=False, index=True)

    email: str = Field(max_length=255, nullable=False)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)

    role: UserRole = Field(default=UserRole.user)
    status: UserStatus = Field(default=UserStatus.active)
    email_verified: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_user_tenant_email", "tenant_id", "email", unique=True),
        Index("idx_user_status", "status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active

    def audit_ref(self) -> Tuple[str, str]:
        return "user", str(self.id)
