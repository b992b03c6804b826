"""
Refresh Token Use Case

Exchanges a refresh token for a new access token and a rotated refresh token.
"""

from typing import Optional

from tenant_auth.app.services.audit_recorder import AuditActor, AuditRecorder, RequestMetadata
from tenant_auth.app.services.refresh_token_store import RefreshTokenStore
from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.domain.errors import ACCOUNT_DISABLED, TOKEN_REPLAY_DETECTED
from tenant_auth.libs.result import Error, Result, Return
from .dtos import TokenResponse
from .login_use_case import build_token_response


class RefreshTokenUseCase:
    """
    Use case for refreshing access tokens.

    Business Rules:
    - Refresh token rotation: the presented token becomes unusable, a
      successor in the same family is issued
    - Revoked, expired and unknown tokens are rejected
    - Presenting an already rotated token is a replay: the whole family is
      revoked and the event is audited with high severity. If the chain was
      already closed by logout, password change or an admin, it is reported
      as TOKEN_REVOKED instead
    - The owner must still be ACTIVE; otherwise nothing is rotated
    """

    def __init__(self, uow: UnitOfWork, issuer: TokenIssuer, audit: AuditRecorder):
        self.uow = uow
        self.issuer = issuer
        self.audit = audit

    async def execute(
        self,
        refresh_token: str,
        tenant_id: str,
        request: Optional[RequestMetadata] = None,
    ) -> Result[TokenResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: The refresh token to rotate
            tenant_id: Tenant resolved for the request, used for audit
                attribution when the token cannot be traced to a user
            request: Client metadata

        Returns:
            Result with TokenResponse, or Error TOKEN_NOT_FOUND / TOKEN_EXPIRED /
            TOKEN_REVOKED / TOKEN_REPLAY_DETECTED / ACCOUNT_DISABLED
        """
        request = request or RequestMetadata()

        with self.audit.observe(
            "token_refresh", AuditActor.system(tenant_id), request, entity_type="refresh_token"
        ) as scope:
            async with self.uow:
                store = RefreshTokenStore(self.uow.refresh_tokens, self.issuer, clock=self.issuer.clock)
                rotated = await store.rotate(
                    refresh_token,
                    device_info=request.user_agent,
                    ip_address=request.ip_address,
                )

                if rotated.is_err():
                    scope.fail(rotated.error)
                    if rotated.error.code == TOKEN_REPLAY_DETECTED:
                        scope.elevate()
                        # Keep the family revocation
                        await self.uow.commit()
                    return rotated

                outcome = rotated.value
                previous = outcome.previous
                scope.target(previous)
                scope.metadata["family_id"] = str(previous.family_id)

                user = await self.uow.users.get_by_id_in_tenant(previous.user_id, previous.tenant_id)
                if user is None or not user.is_active:
                    # Rolled back on exit; the presented token stays usable
                    error = Error(ACCOUNT_DISABLED, "User account is disabled")
                    scope.fail(error)
                    return Return.err(error)

                scope.as_actor(AuditActor(tenant_id=user.tenant_id, user_id=user.id, email=user.email))

                await self.uow.commit()

                access_token, access_expires_at = self.issuer.issue_access_token(user)

                return Return.ok(
                    build_token_response(
                        user,
                        access_token,
                        access_expires_at,
                        outcome.successor.token,
                        int(self.issuer.access_token_ttl.total_seconds()),
                    )
                )
