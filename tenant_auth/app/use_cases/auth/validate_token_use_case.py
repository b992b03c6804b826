"""
Validate Token Use Case

Stateless access-token introspection.
"""

import calendar

from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.libs.result import Result, Return
from .dtos import ClaimsInfo, ValidateTokenResponse


class ValidateTokenUseCase:
    """
    Business Rules:
    - Signature and expiry only; no store is consulted, so a token stays
      valid until it expires even after its refresh tokens are revoked
    - An invalid token is a normal answer (valid=False), not an error
    """

    def __init__(self, issuer: TokenIssuer):
        self.issuer = issuer

    def execute(self, token: str) -> Result[ValidateTokenResponse]:
        validated = self.issuer.validate_access_token(token)
        if validated.is_err():
            return Return.ok(ValidateTokenResponse(valid=False))

        claims = validated.value
        return Return.ok(
            ValidateTokenResponse(
                valid=True,
                claims=ClaimsInfo(
                    user_id=str(claims.user_id),
                    tenant_id=claims.tenant_id,
                    role=claims.role.value,
                    email=claims.email,
                    issued_at=calendar.timegm(claims.issued_at.utctimetuple()),
                    expires_at=calendar.timegm(claims.expires_at.utctimetuple()),
                ),
            )
        )
