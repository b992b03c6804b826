from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from tenant_auth.domain.entities import RefreshToken, RefreshTokenStatus


class IRefreshTokenRepository(ABC):
    """RefreshToken repository interface - application layer"""

    @abstractmethod
    async def create(self, token: RefreshToken) -> RefreshToken:
        """Create a new refresh token record"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[RefreshToken]:
        """Get record by SHA-256 hash of the presented token"""
        pass

    @abstractmethod
    async def get_by_id(self, token_id: UUID) -> Optional[RefreshToken]:
        """Get record by id, e.g. to follow replaced_by_id"""
        pass

    @abstractmethod
    async def compare_and_swap_status(
        self,
        token_id: UUID,
        expected: RefreshTokenStatus,
        new: RefreshTokenStatus,
        revoked_at: datetime,
        reason: str,
        replaced_by_id: Optional[UUID] = None,
    ) -> bool:
        """
        Move a record from `expected` to `new` in a single conditional update.

        Returns True only for the caller whose update matched the expected
        status. Concurrent callers racing on the same record get False.
        """
        pass

    @abstractmethod
    async def revoke_all_by_user(
        self, user_id: UUID, tenant_id: str, revoked_at: datetime, reason: str
    ) -> int:
        """Revoke every active record for a user in a tenant. Returns count."""
        pass

    @abstractmethod
    async def revoke_family(
        self, family_id: UUID, revoked_at: datetime, reason: str
    ) -> int:
        """Revoke every active record of a rotation chain. Returns count."""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete records whose expiry has passed. Returns count."""
        pass

    @abstractmethod
    async def delete_revoked_before(self, cutoff: datetime) -> int:
        """Delete rotated/revoked records revoked before cutoff. Returns count."""
        pass
