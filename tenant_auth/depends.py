import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from tenant_auth.adapter.repositories.audit_event_repository import AuditEventRepository
from tenant_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from tenant_auth.api.error import ClientError, public_access_token_error
from tenant_auth.app.services.audit_recorder import AuditRecorder, RequestMetadata
from tenant_auth.app.services.role_hierarchy import RoleLike, satisfies
from tenant_auth.app.services.tenant_context import TenantContext, TenantResolver
from tenant_auth.app.services.token_issuer import TokenClaims, TokenIssuer
from tenant_auth.domain.entities import AuditEvent
from tenant_auth.domain.errors import (
    INSUFFICIENT_ROLE,
    INVALID_TENANT_IDENTIFIER,
    InvalidTenantIdentifier,
    TENANT_MISMATCH,
)
from tenant_auth.libs.result import Error

logger = logging.getLogger(__name__)

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

token_issuer = TokenIssuer(
    secret=ApplicationConfig.JWT_SECRET,
    algorithm=ApplicationConfig.JWT_ALGORITHM,
    issuer=ApplicationConfig.JWT_ISSUER,
    access_token_ttl=timedelta(seconds=ApplicationConfig.ACCESS_TOKEN_TTL_SECONDS),
    refresh_token_ttl=timedelta(seconds=ApplicationConfig.REFRESH_TOKEN_TTL_SECONDS),
)


async def persist_audit_event(event: AuditEvent) -> None:
    """Audit sink: each entry gets its own session so it outlives request rollbacks."""
    async with AsyncSessionLocal() as session:
        await AuditEventRepository(session).create(event)
        await session.commit()


audit_recorder = AuditRecorder(persist_audit_event, queue_size=ApplicationConfig.AUDIT_QUEUE_SIZE)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_issuer() -> TokenIssuer:
    return token_issuer


def get_audit_recorder() -> AuditRecorder:
    return audit_recorder


def get_request_metadata(request: Request) -> RequestMetadata:
    return RequestMetadata(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        request_id=request.headers.get("x-request-id"),
    )


async def get_tenant_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Resolve the request's tenant and hand out a context confined to it.

    The context is cleared when the request finishes, whatever the outcome.

    Raises:
        ClientError: 400 if the tenant header is malformed
    """
    tenant_context = TenantContext(
        default_tenant_id=ApplicationConfig.DEFAULT_TENANT_ID,
        log_changes=ApplicationConfig.ENABLE_TENANT_LOGGING,
    )
    resolver = TenantResolver(
        ApplicationConfig.DEFAULT_TENANT_ID, token_hint=issuer.parse_tenant_hint
    )
    try:
        tenant_context.set(
            resolver.resolve(
                request.headers.get(ApplicationConfig.TENANT_HEADER_NAME),
                credentials.credentials if credentials else None,
            )
        )
    except InvalidTenantIdentifier as exc:
        raise ClientError(
            Error(INVALID_TENANT_IDENTIFIER, str(exc)),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        yield tenant_context
    finally:
        tenant_context.clear()


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tenant_context: TenantContext = Depends(get_tenant_context),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """
    Dependency to extract and verify the access token from the Authorization header.

    Returns:
        Validated claims: user_id, tenant_id, role

    Raises:
        ClientError: 401 if the token is missing or invalid,
            403 if it belongs to another tenant than the request
    """
    if credentials is None or not credentials.credentials:
        raise ClientError(
            Error("UNAUTHORIZED", "Authentication required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    try:
        validated = issuer.validate_access_token(credentials.credentials)
    except Exception as exc:
        logger.error(f"Access token validation failed unexpectedly: {exc}")
        validated = None

    if validated is None or validated.is_err():
        error = validated.error if validated is not None else None
        raise ClientError(
            public_access_token_error(error),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    claims = validated.value
    if claims.tenant_id != tenant_context.current():
        raise ClientError(
            Error(TENANT_MISMATCH, "Token does not belong to the requested tenant"),
            status_code=status.HTTP_403_FORBIDDEN,
        )

    return claims


def require_role(minimum: RoleLike):
    """Dependency factory: the principal's role must be at least `minimum`."""

    async def dependency(principal: TokenClaims = Depends(get_current_principal)) -> TokenClaims:
        if not satisfies(principal.role, minimum):
            raise ClientError(
                Error(INSUFFICIENT_ROLE, "Insufficient role for this operation"),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return principal

    return dependency
