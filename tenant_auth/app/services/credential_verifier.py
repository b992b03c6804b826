"""
Credential Verifier

Tenant-scoped email/password check.
"""

import logging
from functools import lru_cache

import bcrypt

from tenant_auth.app.repositories.user_repository import IUserRepository
from tenant_auth.domain.entities import User
from tenant_auth.domain.errors import ACCOUNT_DISABLED, INVALID_CREDENTIALS
from tenant_auth.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def password_fits(password: str) -> bool:
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> bytes:
    return bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(rounds))


class CredentialVerifier:
    """
    Verifies (tenant_id, email, password) triples.

    Business Rules:
    - Lookup is strictly by (tenant_id, email); same email in another tenant
      never matches
    - Constant-time password comparison; a dummy hash is checked when the
      user does not exist so both paths cost one bcrypt round
    - "No such user" and "wrong password" are indistinguishable
    - Account status is only reported once the password matched
    - Passwords longer than 72 UTF-8 bytes never match and are never
      handed to bcrypt
    """

    def __init__(self, users: IUserRepository, rounds: int = 12):
        self.users = users
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        if not password_fits(password):
            raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(self.rounds)).decode()

    def check_password(self, user: User, password: str) -> bool:
        if not password_fits(password):
            return False
        try:
            return bcrypt.checkpw(password.encode(), user.password_hash.encode())
        except ValueError:
            # Stored value is not a bcrypt hash
            logger.error(f"Unreadable password hash for user {user.id}")
            return False

    async def verify(self, tenant_id: str, email: str, password: str) -> Result[User]:
        """
        Returns:
            Result with the User, or Error INVALID_CREDENTIALS / ACCOUNT_DISABLED
        """
        user = await self.users.get_by_tenant_and_email(tenant_id, email.lower())

        if user is None or not password_fits(password):
            bcrypt.checkpw(b"dummy_password", _dummy_hash(self.rounds))
            return Return.err(Error(INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE))

        if not self.check_password(user, password):
            return Return.err(Error(INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE))

        if not user.is_active:
            return Return.err(Error(ACCOUNT_DISABLED, "User account is disabled"))

        return Return.ok(user)
