"""
Admin API Routes - Platform Administration Endpoints

Cross-tenant operations for SUPER_ADMIN users, and maintenance jobs
authenticated with the admin API key.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from config import ApplicationConfig
from tenant_auth.api.error import ClientError, ServerError
from tenant_auth.api.utils.admin_auth import verify_admin_api_key
from tenant_auth.app.services.audit_recorder import AuditRecorder, RequestMetadata
from tenant_auth.app.services.tenant_context import TenantContext
from tenant_auth.app.services.token_issuer import TokenClaims, TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.app.use_cases.sessions import (
    RevokeSessionsUseCase,
    SweepRefreshTokensUseCase,
    SweepResponse,
)
from tenant_auth.depends import (
    get_audit_recorder,
    get_request_metadata,
    get_tenant_context,
    get_token_issuer,
    get_unit_of_work,
    require_role,
)
from tenant_auth.domain.entities import UserRole
from tenant_auth.domain.errors import (
    FORBIDDEN,
    INVALID_TENANT_IDENTIFIER,
    InvalidTenantIdentifier,
    USER_NOT_FOUND,
)
from tenant_auth.libs.result import Error

router = APIRouter(prefix="/admin", tags=["Admin"])


class AdminRevokeSessionsResponse(BaseModel):
    message: str
    tenant_id: str
    target_user_id: str
    revoked_count: int


@router.post(
    "/tenants/{tenant_id}/users/{user_id}/revoke-sessions",
    status_code=status.HTTP_200_OK,
    response_model=AdminRevokeSessionsResponse,
)
async def revoke_user_sessions_in_tenant(
    tenant_id: str,
    user_id: UUID,
    principal: TokenClaims = Depends(require_role(UserRole.super_admin)),
    tenant_context: TenantContext = Depends(get_tenant_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    issuer: TokenIssuer = Depends(get_token_issuer),
    audit: AuditRecorder = Depends(get_audit_recorder),
    metadata: RequestMetadata = Depends(get_request_metadata),
):
    """
    Revoke a user's sessions in any tenant.

    Runs inside a temporary scope of the target tenant; the request's own
    tenant is restored afterwards.

    Requires: SUPER_ADMIN access token

    Raises:
        - 400 Bad Request: Malformed tenant identifier
        - 403 Forbidden: Not a SUPER_ADMIN
        - 404 Not Found: User not found in the target tenant
    """
    use_case = RevokeSessionsUseCase(uow, issuer, audit)
    try:
        with tenant_context.scoped(tenant_id):
            result = await use_case.revoke_all_sessions(
                user_id,
                principal.user_id,
                tenant_context.current(),
                principal.role,
                requesting_email=principal.email,
                request=metadata,
            )
    except InvalidTenantIdentifier as exc:
        raise ClientError(Error(INVALID_TENANT_IDENTIFIER, str(exc)))

    if result.is_err():
        error = result.error
        if error.code == FORBIDDEN:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == USER_NOT_FOUND:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return AdminRevokeSessionsResponse(
        message="Sessions revoked successfully",
        tenant_id=tenant_id,
        target_user_id=result.value["target_user_id"],
        revoked_count=result.value["revoked_count"],
    )


@router.post(
    "/refresh-tokens/sweep",
    status_code=status.HTTP_200_OK,
    response_model=SweepResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def sweep_refresh_tokens(
    uow: UnitOfWork = Depends(get_unit_of_work),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Delete expired refresh tokens and terminal ones past the retention period.

    Intended for a scheduler. Safe to run alongside live traffic.

    Requires: X-Admin-API-Key header
    """
    use_case = SweepRefreshTokensUseCase(
        uow, issuer, retention_days=ApplicationConfig.REVOKED_TOKEN_RETENTION_DAYS
    )
    result = await use_case.execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value
