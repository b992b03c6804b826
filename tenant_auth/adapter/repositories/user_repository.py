from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_auth.app.repositories.user_repository import IUserRepository
from tenant_auth.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_tenant_and_email(self, tenant_id: str, email: str) -> Optional[User]:
        stmt = select(User).where(User.tenant_id == tenant_id, User.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id_in_tenant(self, user_id: UUID, tenant_id: str) -> Optional[User]:
        stmt = select(User).where(User.id == user_id, User.tenant_id == tenant_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def update(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user
