"""
Login Use Case

Authenticates a user within a tenant and starts a new refresh-token family.
"""

from datetime import datetime
from typing import Optional

from tenant_auth.app.services.audit_recorder import AuditActor, AuditRecorder, RequestMetadata
from tenant_auth.app.services.credential_verifier import CredentialVerifier
from tenant_auth.app.services.refresh_token_store import RefreshTokenStore
from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.domain.entities import User, UserRole
from tenant_auth.libs.result import Result, Return
from .dtos import LoginCommand, TokenResponse, UserInfo


def build_token_response(
    user: User,
    access_token: str,
    access_expires_at: datetime,
    refresh_token: str,
    expires_in: int,
) -> TokenResponse:
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=expires_in,
        expires_at=access_expires_at,
        user=UserInfo(
            id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=UserRole(user.role).value,
            tenant_id=user.tenant_id,
        ),
    )


class LoginUseCase:
    """
    Use case for user login and token issuance.

    Business Rules:
    - Credentials are checked strictly within the requested tenant
    - Unknown user and wrong password produce the same error
    - User must have status=ACTIVE
    - Each login starts an independent refresh-token family
    - Updates user.last_login_at
    - Success and failure are both audited
    """

    def __init__(
        self,
        uow: UnitOfWork,
        issuer: TokenIssuer,
        audit: AuditRecorder,
        bcrypt_rounds: int = 12,
    ):
        self.uow = uow
        self.issuer = issuer
        self.audit = audit
        self.bcrypt_rounds = bcrypt_rounds

    async def execute(
        self, command: LoginCommand, request: Optional[RequestMetadata] = None
    ) -> Result[TokenResponse]:
        """
        Execute login use case.

        Args:
            command: LoginCommand with tenant, email and password
            request: Client metadata for the audit trail and the session record

        Returns:
            Result with TokenResponse, or Error INVALID_CREDENTIALS / ACCOUNT_DISABLED
        """
        request = request or RequestMetadata()

        with self.audit.observe(
            "login", AuditActor.system(command.tenant_id), request, entity_type="user"
        ) as scope:
            scope.metadata["email"] = command.email

            async with self.uow:
                verifier = CredentialVerifier(self.uow.users, rounds=self.bcrypt_rounds)
                verified = await verifier.verify(command.tenant_id, command.email, command.password)
                if verified.is_err():
                    scope.fail(verified.error)
                    return verified

                user = verified.value
                scope.as_actor(AuditActor(tenant_id=user.tenant_id, user_id=user.id, email=user.email))
                scope.target(user)

                store = RefreshTokenStore(self.uow.refresh_tokens, self.issuer, clock=self.issuer.clock)
                issued = await store.issue(
                    user,
                    user.tenant_id,
                    device_info=request.user_agent,
                    ip_address=request.ip_address,
                )

                user.last_login_at = self.issuer.clock()
                await self.uow.users.update(user)

                await self.uow.commit()

                access_token, access_expires_at = self.issuer.issue_access_token(user)
                scope.metadata["family_id"] = str(issued.record.family_id)

                return Return.ok(
                    build_token_response(
                        user,
                        access_token,
                        access_expires_at,
                        issued.token,
                        int(self.issuer.access_token_ttl.total_seconds()),
                    )
                )
