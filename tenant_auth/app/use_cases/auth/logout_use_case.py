"""
Logout Use Case

Revokes the presented refresh token, or every token of its owner.
"""

from typing import Optional

from tenant_auth.app.services.audit_recorder import AuditActor, AuditRecorder, RequestMetadata
from tenant_auth.app.services.refresh_token_store import (
    REASON_LOGOUT,
    REASON_LOGOUT_ALL,
    RefreshTokenStore,
)
from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.libs.result import Result, Return
from .dtos import LogoutResponse


class LogoutUseCase:
    """
    Use case for logout.

    Business Rules:
    - Ordinary logout revokes only the presented token; other sessions survive
    - "Everywhere" revokes every active token of the token's owner in its tenant
    - Idempotent: unknown or already terminal tokens are acknowledged the same
      way, so the response reveals nothing about token state
    """

    def __init__(self, uow: UnitOfWork, issuer: TokenIssuer, audit: AuditRecorder):
        self.uow = uow
        self.issuer = issuer
        self.audit = audit

    async def execute(
        self,
        refresh_token: str,
        tenant_id: str,
        everywhere: bool = False,
        request: Optional[RequestMetadata] = None,
    ) -> Result[LogoutResponse]:
        action = "logout_all" if everywhere else "logout"

        with self.audit.observe(
            action, AuditActor.system(tenant_id), request, entity_type="refresh_token"
        ) as scope:
            async with self.uow:
                store = RefreshTokenStore(self.uow.refresh_tokens, self.issuer, clock=self.issuer.clock)
                record = await store.lookup(refresh_token)
                if record is None:
                    scope.metadata["token_found"] = False
                    return Return.ok(LogoutResponse(message="Logged out successfully"))

                scope.target(record)
                owner = await self.uow.users.get_by_id_in_tenant(record.user_id, record.tenant_id)
                if owner is not None:
                    scope.as_actor(
                        AuditActor(tenant_id=owner.tenant_id, user_id=owner.id, email=owner.email)
                    )

                if everywhere:
                    count = await store.revoke_all(record.user_id, record.tenant_id, REASON_LOGOUT_ALL)
                else:
                    count = 1 if await store.revoke_one(refresh_token, REASON_LOGOUT) else 0

                await self.uow.commit()

                scope.metadata["revoked_count"] = count
                return Return.ok(
                    LogoutResponse(message="Logged out successfully", revoked_count=count)
                )
