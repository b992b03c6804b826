"""
Audit API Routes

Handles audit event retrieval endpoints.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from tenant_auth.api.error import ClientError, ServerError
from tenant_auth.app.services.tenant_context import TenantContext
from tenant_auth.app.services.token_issuer import TokenClaims
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.app.use_cases.audit import GetAuditEventsUseCase
from tenant_auth.depends import get_tenant_context, get_unit_of_work, require_role
from tenant_auth.domain.entities import UserRole
from tenant_auth.domain.errors import INSUFFICIENT_ROLE

router = APIRouter(prefix="/audit", tags=["Audit"])


class AuditEventResponse(BaseModel):
    """Single audit event in response"""

    id: str
    action: str
    user_id: str
    user_email: str
    entity_type: Optional[str]
    entity_id: Optional[str]
    success: bool
    error_message: Optional[str]
    severity: Optional[str]
    execution_time_ms: Optional[int]
    ip_address: Optional[str]
    timestamp: str
    metadata: Dict[str, Any]


class AuditEventsResponse(BaseModel):
    """GET /audit/events response payload"""

    events: List[AuditEventResponse]
    next_cursor: Optional[str]


@router.get(
    "/events",
    status_code=status.HTTP_200_OK,
    response_model=AuditEventsResponse,
)
async def get_audit_events(
    principal: TokenClaims = Depends(require_role(UserRole.admin)),
    tenant_context: TenantContext = Depends(get_tenant_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of events to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    action: Optional[str] = Query(None, description="Only events with this action"),
):
    """
    Get Audit Events

    Returns the tenant's audit log, newest first. ADMIN and above only.

    Returns:
        - events: List of audit events ordered by newest first
        - next_cursor: Cursor for next page (null if no more events)

    Raises:
        - 401 Unauthorized: Invalid or expired access token
        - 403 Forbidden: Insufficient role or tenant mismatch
    """
    use_case = GetAuditEventsUseCase(uow)
    result = await use_case.execute(
        tenant_id=tenant_context.current(),
        role=principal.role,
        limit=limit,
        cursor=cursor,
        action=action,
    )

    if result.is_err():
        error = result.error
        if error.code == INSUFFICIENT_ROLE:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value
