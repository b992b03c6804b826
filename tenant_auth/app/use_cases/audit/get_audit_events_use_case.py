"""
Get Audit Events Use Case

Retrieves audit events for a tenant with pagination.
"""

from typing import Any, Dict, Optional

from tenant_auth.app.services.role_hierarchy import satisfies
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.domain.entities import UserRole
from tenant_auth.domain.errors import INSUFFICIENT_ROLE
from tenant_auth.libs.result import Error, Result, Return

MAX_PAGE_SIZE = 200


class GetAuditEventsUseCase:
    """
    Use case for retrieving audit events for a tenant.

    Business Rules:
    - Caller must be ADMIN or above
    - Results are tenant-scoped (only events for the tenant)
    - Results ordered by newest first
    - Supports cursor-based pagination and filtering by action
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        tenant_id: str,
        role: str,
        limit: int = 50,
        cursor: Optional[str] = None,
        action: Optional[str] = None,
    ) -> Result[Dict[str, Any]]:
        """
        Args:
            tenant_id: Tenant resolved for the request
            role: Role from the access token
            limit: Page size, capped at MAX_PAGE_SIZE
            cursor: Pagination cursor from a previous page
            action: Only return events with this action

        Returns:
            Result with events list and next_cursor, or Error INSUFFICIENT_ROLE
        """
        if not satisfies(role, UserRole.admin):
            return Return.err(
                Error(INSUFFICIENT_ROLE, "You do not have permission to view audit events")
            )

        limit = max(1, min(limit, MAX_PAGE_SIZE))

        async with self.uow:
            events, next_cursor = await self.uow.audit_events.get_by_tenant_paginated(
                tenant_id, limit=limit, cursor=cursor, action=action
            )

            events_list = [
                {
                    "id": str(event.id),
                    "action": event.action,
                    "user_id": str(event.user_id),
                    "user_email": event.user_email,
                    "entity_type": event.entity_type,
                    "entity_id": event.entity_id,
                    "success": event.success,
                    "error_message": event.error_message,
                    "severity": event.severity.value if event.severity else None,
                    "execution_time_ms": event.execution_time_ms,
                    "ip_address": event.ip_address,
                    "timestamp": event.created_at.isoformat() + "Z",
                    "metadata": event.event_metadata or {},
                }
                for event in events
            ]

            return Return.ok({"events": events_list, "next_cursor": next_cursor})
