"""
Token Issuer

Creates signed access tokens and opaque refresh tokens, and validates
access tokens without touching any store.
"""

import calendar
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from pydantic import BaseModel

from tenant_auth.domain.base import utc_now
from tenant_auth.domain.entities import User, UserRole
from tenant_auth.domain.errors import (
    EXPIRED_TOKEN,
    INVALID_SIGNATURE,
    MALFORMED_TOKEN,
)
from tenant_auth.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"

_REQUIRED_CLAIMS = ("user_id", "tenant_id", "role", "iat", "exp")


class TokenClaims(BaseModel):
    """Validated access-token claims"""

    user_id: UUID
    tenant_id: str
    role: UserRole
    email: Optional[str] = None
    issued_at: datetime
    expires_at: datetime
    token_id: Optional[str] = None


def _to_timestamp(value: datetime) -> int:
    return calendar.timegm(value.utctimetuple())


def _from_timestamp(value: int) -> datetime:
    return datetime(1970, 1, 1) + timedelta(seconds=value)


def hash_refresh_token(token: str) -> str:
    """One-way SHA-256 hash used to store and look up refresh tokens."""
    return hashlib.sha256(token.encode()).hexdigest()


class TokenIssuer:
    """
    Issues and validates tokens.

    Business Rules:
    - Access tokens are self-contained JWTs; validity is signature + expiry
    - A token is valid while now < exp and expired from exp onwards
    - Refresh tokens are random, not derived from user data; only their
      hash ever leaves this class
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        issuer: str = "tenant-auth-service",
        access_token_ttl: timedelta = timedelta(minutes=15),
        refresh_token_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl
        self.clock = clock

    def _now(self) -> datetime:
        # JWT timestamps have second resolution
        return self.clock().replace(microsecond=0)

    def issue_access_token(self, user: User) -> Tuple[str, datetime]:
        """
        Build and sign an access token for the user.

        Returns:
            (token, expires_at) with expires_at as naive UTC
        """
        now = self._now()
        expires_at = now + self.access_token_ttl
        payload = {
            "sub": str(user.id),
            "user_id": str(user.id),
            "tenant_id": user.tenant_id,
            "role": UserRole(user.role).value,
            "email": user.email,
            "token_type": ACCESS_TOKEN_TYPE,
            "iss": self.issuer,
            "jti": str(uuid4()),
            "iat": _to_timestamp(now),
            "exp": _to_timestamp(expires_at),
        }
        token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        return token, expires_at

    def issue_refresh_token(self) -> Tuple[str, datetime]:
        """
        Generate an opaque refresh token.

        Returns:
            (token, expires_at); the cleartext token is never persisted
        """
        return secrets.token_urlsafe(32), self._now() + self.refresh_token_ttl

    def validate_access_token(self, token: str) -> Result[TokenClaims]:
        """
        Verify structure, signature, claim shape and expiry, in that order.

        Returns:
            Result with TokenClaims, or Error EXPIRED_TOKEN / INVALID_SIGNATURE /
            MALFORMED_TOKEN
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError:
            return Return.err(Error(MALFORMED_TOKEN, "Malformed token"))

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTClaimsError:
            return Return.err(Error(MALFORMED_TOKEN, "Malformed token"))
        except ExpiredSignatureError:
            # verify_exp is off; kept for safety if options are ignored
            return Return.err(Error(EXPIRED_TOKEN, "Token has expired"))
        except JWTError:
            return Return.err(Error(INVALID_SIGNATURE, "Invalid token signature"))

        claims = self._parse_claims(payload)
        if claims is None:
            return Return.err(Error(MALFORMED_TOKEN, "Malformed token"))

        if self._now() >= claims.expires_at:
            return Return.err(Error(EXPIRED_TOKEN, "Token has expired"))

        return Return.ok(claims)

    def parse_tenant_hint(self, token: Optional[str]) -> Optional[str]:
        """
        Best-effort tenant extraction for tenant resolution.

        The signature is checked but expiry is ignored. Any failure yields None.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_aud": False, "verify_iss": False},
            )
        except JWTError:
            logger.debug("Ignoring tenant hint from unverifiable token")
            return None

        tenant_id = payload.get("tenant_id")
        if tenant_id is None:
            return None
        return str(tenant_id)

    def _parse_claims(self, payload: dict) -> Optional[TokenClaims]:
        if any(key not in payload for key in _REQUIRED_CLAIMS):
            return None
        if payload.get("token_type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
            return None
        try:
            return TokenClaims(
                user_id=UUID(str(payload["user_id"])),
                tenant_id=str(payload["tenant_id"]),
                role=UserRole(payload["role"]),
                email=payload.get("email"),
                issued_at=_from_timestamp(int(payload["iat"])),
                expires_at=_from_timestamp(int(payload["exp"])),
                token_id=payload.get("jti"),
            )
        except (TypeError, ValueError):
            return None
