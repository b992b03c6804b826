"""
Revoke Sessions Use Case

Revokes every refresh token of a user, on their own request or an admin's.
"""

from typing import Optional
from uuid import UUID

from tenant_auth.app.services.audit_recorder import AuditActor, AuditRecorder, RequestMetadata
from tenant_auth.app.services.refresh_token_store import REASON_ADMIN, REASON_LOGOUT_ALL, RefreshTokenStore
from tenant_auth.app.services.role_hierarchy import satisfies
from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.domain.entities import UserRole
from tenant_auth.domain.errors import FORBIDDEN, USER_NOT_FOUND
from tenant_auth.libs.result import Error, Result, Return


class RevokeSessionsUseCase:
    """
    Use case for revoking user sessions.

    Business Rules:
    - Users can revoke their own sessions
    - ADMIN and above can revoke any user's sessions within the tenant
    - The target user is looked up in the given tenant only
    - Revocation is audit-logged with high severity
    """

    def __init__(self, uow: UnitOfWork, issuer: TokenIssuer, audit: AuditRecorder):
        self.uow = uow
        self.issuer = issuer
        self.audit = audit

    async def revoke_all_sessions(
        self,
        target_user_id: UUID,
        requesting_user_id: UUID,
        tenant_id: str,
        requesting_role: str,
        requesting_email: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
    ) -> Result[dict]:
        """
        Revoke all sessions for a user.

        Args:
            target_user_id: User whose sessions will be revoked
            requesting_user_id: User requesting the revocation
            tenant_id: Tenant the target user belongs to
            requesting_role: Role of requesting user
            requesting_email: Email of requesting user, for the audit trail
            request: Client metadata

        Returns:
            Result with count of revoked sessions, or Error FORBIDDEN / USER_NOT_FOUND
        """
        actor = AuditActor(
            tenant_id=tenant_id,
            user_id=requesting_user_id,
            email=requesting_email or "unknown",
        )
        is_self = target_user_id == requesting_user_id

        with self.audit.observe(
            "revoke_all_sessions", actor, request, entity_type="user", high_risk=True
        ) as scope:
            scope.metadata["is_self"] = is_self

            if not is_self and not satisfies(requesting_role, UserRole.admin):
                error = Error(FORBIDDEN, "Only admins can revoke other users' sessions")
                scope.fail(error)
                return Return.err(error)

            async with self.uow:
                target_user = await self.uow.users.get_by_id_in_tenant(target_user_id, tenant_id)
                if target_user is None:
                    error = Error(USER_NOT_FOUND, "User not found")
                    scope.fail(error)
                    return Return.err(error)

                scope.target(target_user)

                store = RefreshTokenStore(self.uow.refresh_tokens, self.issuer, clock=self.issuer.clock)
                reason = REASON_LOGOUT_ALL if is_self else REASON_ADMIN
                count = await store.revoke_all(target_user_id, tenant_id, reason)

                await self.uow.commit()

                scope.metadata["revoked_count"] = count
                return Return.ok({"revoked_count": count, "target_user_id": str(target_user_id)})
