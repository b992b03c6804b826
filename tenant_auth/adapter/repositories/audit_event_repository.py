import base64
import binascii
from datetime import datetime
from typing import List, Optional, Tuple

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_auth.app.repositories.audit_event_repository import IAuditEventRepository
from tenant_auth.domain.entities import AuditEvent


def encode_cursor(created_at: datetime) -> str:
    return base64.urlsafe_b64encode(created_at.isoformat().encode("utf-8")).decode("utf-8")


def decode_cursor(cursor: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(base64.urlsafe_b64decode(cursor).decode("utf-8"))
    except (ValueError, TypeError, binascii.Error):
        return None


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        self.session.add(audit_event)
        await self.session.flush()
        await self.session.refresh(audit_event)
        return audit_event

    async def get_by_tenant_paginated(
        self,
        tenant_id: str,
        limit: int = 50,
        cursor: Optional[str] = None,
        action: Optional[str] = None,
    ) -> Tuple[List[AuditEvent], Optional[str]]:
        """
        Newest first. The cursor is the base64 of the last returned created_at;
        an unreadable cursor restarts from the newest event.
        """
        stmt = select(AuditEvent).where(AuditEvent.tenant_id == tenant_id)
        if action:
            stmt = stmt.where(AuditEvent.action == action)

        if cursor:
            cursor_timestamp = decode_cursor(cursor)
            if cursor_timestamp is not None:
                stmt = stmt.where(AuditEvent.created_at < cursor_timestamp)

        stmt = stmt.order_by(AuditEvent.created_at.desc()).limit(limit + 1)
        result = await self.session.exec(stmt)
        events = list(result.all())

        has_more = len(events) > limit
        if has_more:
            events = events[:limit]

        next_cursor = None
        if has_more and events:
            next_cursor = encode_cursor(events[-1].created_at)

        return events, next_cursor
