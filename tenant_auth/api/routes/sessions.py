from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from tenant_auth.api.error import ClientError, ServerError
from tenant_auth.app.services.audit_recorder import AuditRecorder, RequestMetadata
from tenant_auth.app.services.tenant_context import TenantContext
from tenant_auth.app.services.token_issuer import TokenClaims, TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.app.use_cases.sessions import RevokeSessionsUseCase
from tenant_auth.depends import (
    get_audit_recorder,
    get_current_principal,
    get_request_metadata,
    get_tenant_context,
    get_token_issuer,
    get_unit_of_work,
)
from tenant_auth.domain.errors import FORBIDDEN, USER_NOT_FOUND

router = APIRouter(prefix="/sessions", tags=["Sessions"])


class RevokeAllSessionsRequest(BaseModel):
    """Request to revoke all sessions for a user; defaults to the caller"""

    user_id: Optional[UUID] = Field(None, description="User ID whose sessions will be revoked")


class RevokeSessionResponse(BaseModel):
    """Response for session revocation operations"""

    message: str
    revoked_count: int


@router.post(
    "/revoke-all",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
)
async def revoke_all_sessions(
    request: RevokeAllSessionsRequest,
    principal: TokenClaims = Depends(get_current_principal),
    tenant_context: TenantContext = Depends(get_tenant_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    issuer: TokenIssuer = Depends(get_token_issuer),
    audit: AuditRecorder = Depends(get_audit_recorder),
    metadata: RequestMetadata = Depends(get_request_metadata),
):
    """
    Revoke All Sessions

    Revokes every refresh token of a user. Access tokens already issued
    remain valid until they expire.

    Authorization:
    - Users can revoke their own sessions
    - ADMIN and above can revoke any user's sessions within their tenant

    Raises:
        - 403 Forbidden: Insufficient permissions
        - 404 Not Found: User not found in this tenant
    """
    use_case = RevokeSessionsUseCase(uow, issuer, audit)
    result = await use_case.revoke_all_sessions(
        request.user_id or principal.user_id,
        principal.user_id,
        tenant_context.current(),
        principal.role,
        requesting_email=principal.email,
        request=metadata,
    )

    if result.is_err():
        error = result.error
        if error.code == FORBIDDEN:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == USER_NOT_FOUND:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return RevokeSessionResponse(
        message="Sessions revoked successfully",
        revoked_count=result.value["revoked_count"],
    )
