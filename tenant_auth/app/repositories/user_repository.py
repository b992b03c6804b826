from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from tenant_auth.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_tenant_and_email(self, tenant_id: str, email: str) -> Optional[User]:
        """Get user by email within a tenant"""
        pass

    @abstractmethod
    async def get_by_id_in_tenant(self, user_id: UUID, tenant_id: str) -> Optional[User]:
        """Get user by ID, only if it belongs to the tenant"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass
