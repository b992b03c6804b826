"""
Change Password Use Case

Lets an authenticated user replace their password.
"""

from typing import Optional

from tenant_auth.app.services.audit_recorder import AuditActor, AuditRecorder, RequestMetadata
from tenant_auth.app.services.credential_verifier import (
    INVALID_CREDENTIALS_MESSAGE,
    MAX_PASSWORD_BYTES,
    CredentialVerifier,
    password_fits,
)
from tenant_auth.app.services.refresh_token_store import REASON_PASSWORD_CHANGED, RefreshTokenStore
from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.domain.errors import INVALID_CREDENTIALS, INVALID_PASSWORD, USER_NOT_FOUND
from tenant_auth.libs.result import Error, Result, Return
from .dtos import ChangePasswordCommand, ChangePasswordResponse


class ChangePasswordUseCase:
    """
    Business Rules:
    - The current password must be presented and must match
    - The new password must fit in 72 UTF-8 bytes and is stored
      as a fresh bcrypt hash
    - Every refresh token of the user is revoked; access tokens already
      issued stay valid until they expire
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
        self, command: ChangePasswordCommand, request: Optional[RequestMetadata] = None
    ) -> Result[ChangePasswordResponse]:
        with self.audit.observe(
            "change_password",
            AuditActor(tenant_id=command.tenant_id, user_id=command.user_id),
            request,
            entity_type="user",
            high_risk=True,
        ) as scope:
            async with self.uow:
                user = await self.uow.users.get_by_id_in_tenant(command.user_id, command.tenant_id)
                if user is None:
                    error = Error(USER_NOT_FOUND, "User not found")
                    scope.fail(error)
                    return Return.err(error)

                scope.as_actor(AuditActor(tenant_id=user.tenant_id, user_id=user.id, email=user.email))
                scope.target(user)

                verifier = CredentialVerifier(self.uow.users, rounds=self.bcrypt_rounds)
                if not verifier.check_password(user, command.current_password):
                    error = Error(INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
                    scope.fail(error)
                    return Return.err(error)

                if not password_fits(command.new_password):
                    error = Error(
                        INVALID_PASSWORD, f"New password must be at most {MAX_PASSWORD_BYTES} bytes"
                    )
                    scope.fail(error)
                    return Return.err(error)

                user.password_hash = verifier.hash_password(command.new_password)
                await self.uow.users.update(user)

                store = RefreshTokenStore(self.uow.refresh_tokens, self.issuer, clock=self.issuer.clock)
                revoked = await store.revoke_all(user.id, user.tenant_id, REASON_PASSWORD_CHANGED)

                await self.uow.commit()

                scope.metadata["revoked_sessions"] = revoked
                return Return.ok(
                    ChangePasswordResponse(
                        message="Password changed successfully", revoked_sessions=revoked
                    )
                )
