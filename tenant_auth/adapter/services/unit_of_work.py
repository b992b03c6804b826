from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_auth.adapter.repositories.audit_event_repository import AuditEventRepository
from tenant_auth.adapter.repositories.refresh_token_repository import RefreshTokenRepository
from tenant_auth.adapter.repositories.user_repository import UserRepository
from tenant_auth.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.users = UserRepository(self.session)
        self.refresh_tokens = RefreshTokenRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed inside the block is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
