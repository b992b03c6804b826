from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import EmailStr, Field, field_validator

from config import ApplicationConfig
from tenant_auth.api.error import ClientError, ServerError, public_refresh_token_error
from tenant_auth.api.limiter import enforce_refresh_limit, limiter, login_limit
from tenant_auth.app.services.audit_recorder import AuditRecorder, RequestMetadata
from tenant_auth.app.services.credential_verifier import MAX_PASSWORD_BYTES, password_fits
from tenant_auth.app.services.tenant_context import TenantContext
from tenant_auth.app.services.token_issuer import TokenClaims, TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.app.use_cases.auth import (
    ChangePasswordCommand,
    ChangePasswordResponse,
    ChangePasswordUseCase,
    LoginCommand,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenUseCase,
    TokenResponse,
    ValidateTokenResponse,
    ValidateTokenUseCase,
)
from tenant_auth.app.use_cases.auth.dtos import CamelModel
from tenant_auth.depends import (
    get_audit_recorder,
    get_current_principal,
    get_request_metadata,
    get_tenant_context,
    get_token_issuer,
    get_unit_of_work,
    security,
)
from tenant_auth.domain.errors import (
    ACCOUNT_DISABLED,
    INVALID_CREDENTIALS,
    INVALID_PASSWORD,
    REFRESH_TOKEN_ERRORS,
    USER_NOT_FOUND,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _check_password_bytes(value: str) -> str:
    if not password_fits(value):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


class LoginRequest(CamelModel):
    """
    Login HTTP request payload

    The tenant comes from the tenant header (or the configured default).
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=72, description="User password")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


@router.post("/login", status_code=status.HTTP_200_OK, response_model=TokenResponse)
@limiter.limit(login_limit)
async def login(
    request: Request,
    body: LoginRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    tenant_context: TenantContext = Depends(get_tenant_context),
    issuer: TokenIssuer = Depends(get_token_issuer),
    audit: AuditRecorder = Depends(get_audit_recorder),
    metadata: RequestMetadata = Depends(get_request_metadata),
):
    """
    User Login

    Authenticates the user within the resolved tenant and returns an access
    token plus a refresh token.

    Raises:
        - 400 Bad Request: Malformed tenant header
        - 401 Unauthorized: Invalid credentials (same answer for unknown user)
        - 403 Forbidden: Account not active
        - 429 Too Many Requests: Too many attempts from this client address
    """
    command = LoginCommand(
        tenant_id=tenant_context.current(),
        email=body.email,
        password=body.password,
    )
    use_case = LoginUseCase(uow, issuer, audit, bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS)
    result = await use_case.execute(command, metadata)

    if result.is_err():
        error = result.error
        if error.code == INVALID_CREDENTIALS:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == ACCOUNT_DISABLED:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=TokenResponse)
async def refresh(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    tenant_context: TenantContext = Depends(get_tenant_context),
    issuer: TokenIssuer = Depends(get_token_issuer),
    audit: AuditRecorder = Depends(get_audit_recorder),
    metadata: RequestMetadata = Depends(get_request_metadata),
):
    """
    Refresh Tokens

    Rotates the refresh token and issues a new access token. A refresh token
    can be used exactly once.

    Raises:
        - 401 Unauthorized: Unknown, reused, expired or revoked refresh token
        - 403 Forbidden: Account not active
        - 429 Too Many Requests: Too many attempts with this refresh token
    """
    enforce_refresh_limit(request.refresh_token)

    use_case = RefreshTokenUseCase(uow, issuer, audit)
    result = await use_case.execute(request.refresh_token, tenant_context.current(), metadata)

    if result.is_err():
        error = result.error
        if error.code in REFRESH_TOKEN_ERRORS:
            raise ClientError(
                public_refresh_token_error(error), status_code=status.HTTP_401_UNAUTHORIZED
            )
        elif error.code == ACCOUNT_DISABLED:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


@router.get("/validate", status_code=status.HTTP_200_OK, response_model=ValidateTokenResponse)
async def validate(
    credentials=Depends(security),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Validate Access Token

    Returns valid=false (not an error status) for missing or invalid tokens.
    """
    if credentials is None:
        return ValidateTokenResponse(valid=False)

    result = ValidateTokenUseCase(issuer).execute(credentials.credentials)
    return result.value


class LogoutRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token to revoke")
    everywhere: bool = Field(False, description="Revoke every session of the token's owner")


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: LogoutRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    tenant_context: TenantContext = Depends(get_tenant_context),
    issuer: TokenIssuer = Depends(get_token_issuer),
    audit: AuditRecorder = Depends(get_audit_recorder),
    metadata: RequestMetadata = Depends(get_request_metadata),
):
    """
    Logout

    Revokes the presented refresh token, or all of its owner's tokens when
    everywhere=true. Always acknowledges.
    """
    use_case = LogoutUseCase(uow, issuer, audit)
    result = await use_case.execute(
        request.refresh_token,
        tenant_context.current(),
        everywhere=request.everywhere,
        request=metadata,
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=72)
    new_password: str = Field(..., min_length=8, max_length=72, description="New password (min 8 chars)")

    @field_validator("current_password", "new_password")
    @classmethod
    def passwords_fit_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


@router.post("/change-password", status_code=status.HTTP_200_OK, response_model=ChangePasswordResponse)
async def change_password(
    request: ChangePasswordRequest,
    principal: TokenClaims = Depends(get_current_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    issuer: TokenIssuer = Depends(get_token_issuer),
    audit: AuditRecorder = Depends(get_audit_recorder),
    metadata: RequestMetadata = Depends(get_request_metadata),
):
    """
    Change Password

    Requires the current password. Signs the user out of every session.

    Raises:
        - 401 Unauthorized: Invalid access token or wrong current password
        - 404 Not Found: User no longer exists
    """
    command = ChangePasswordCommand(
        user_id=principal.user_id,
        tenant_id=principal.tenant_id,
        current_password=request.current_password,
        new_password=request.new_password,
    )
    use_case = ChangePasswordUseCase(uow, issuer, audit, bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS)
    result = await use_case.execute(command, metadata)

    if result.is_err():
        error = result.error
        if error.code == INVALID_CREDENTIALS:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == USER_NOT_FOUND:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == INVALID_PASSWORD:
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


class PrincipalResponse(CamelModel):
    user_id: str
    tenant_id: str
    role: str
    email: Optional[str] = None


@router.get("/me", status_code=status.HTTP_200_OK, response_model=PrincipalResponse)
async def me(principal: TokenClaims = Depends(get_current_principal)):
    """Return the (user, tenant, role) principal resolved from the access token."""
    return PrincipalResponse(
        user_id=str(principal.user_id),
        tenant_id=principal.tenant_id,
        role=principal.role.value,
        email=principal.email,
    )
