"""
AuditEvent Entity

Append-only record of privileged operations.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from tenant_auth.domain.base import utc_now
from .enums import AuditSeverity


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - who did what, when, from where, and how it ended.

    Business Rules:
    - Immutable (never updated)
    - Unauthenticated operations are attributed to the system actor
    - Failures carry the error message; replay detection is high severity
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: str = Field(max_length=50, index=True)
    user_id: UUID = Field(index=True)
    user_email: str = Field(max_length=255)

    action: str = Field(max_length=100)  # e.g., "login", "token_refresh"
    entity_type: Optional[str] = Field(default=None, max_length=50)
    entity_id: Optional[str] = Field(default=None, max_length=100)

    success: bool = Field(default=True)
    error_message: Optional[str] = Field(default=None)
    severity: AuditSeverity = Field(default=AuditSeverity.info)
    execution_time_ms: Optional[int] = Field(default=None)

    # Request metadata
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None)
    request_id: Optional[str] = Field(default=None, max_length=100)

    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_tenant_action", "tenant_id", "action"),
        Index("idx_audit_user_id", "user_id"),
    )
