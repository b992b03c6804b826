from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from tenant_auth.app.repositories.refresh_token_repository import IRefreshTokenRepository
from tenant_auth.domain.entities import RefreshToken, RefreshTokenStatus


class RefreshTokenRepository(IRefreshTokenRepository):
    """
    RefreshToken repository implementation using SQLModel.

    Every state change is a conditional UPDATE filtered on the current
    status; the affected row count tells the caller whether it won.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, token: RefreshToken) -> RefreshToken:
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def get_by_token_hash(self, token_hash: str) -> Optional[RefreshToken]:
        # Bypass the identity map so a losing CAS sees the winner's state
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, token_id: UUID) -> Optional[RefreshToken]:
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.id == token_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def compare_and_swap_status(
        self,
        token_id: UUID,
        expected: RefreshTokenStatus,
        new: RefreshTokenStatus,
        revoked_at: datetime,
        reason: str,
        replaced_by_id: Optional[UUID] = None,
    ) -> bool:
        values = {
            "status": new,
            "revoked": new != RefreshTokenStatus.active,
            "revoked_at": revoked_at,
            "revocation_reason": reason,
        }
        if replaced_by_id is not None:
            values["replaced_by_id"] = replaced_by_id

        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.status == expected)
            .values(**values)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def revoke_all_by_user(
        self, user_id: UUID, tenant_id: str, revoked_at: datetime, reason: str
    ) -> int:
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.tenant_id == tenant_id,
                RefreshToken.status == RefreshTokenStatus.active,
            )
            .values(
                status=RefreshTokenStatus.revoked,
                revoked=True,
                revoked_at=revoked_at,
                revocation_reason=reason,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_family(self, family_id: UUID, revoked_at: datetime, reason: str) -> int:
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.family_id == family_id,
                RefreshToken.status == RefreshTokenStatus.active,
            )
            .values(
                status=RefreshTokenStatus.revoked,
                revoked=True,
                revoked_at=revoked_at,
                revocation_reason=reason,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(RefreshToken).where(RefreshToken.expires_at <= now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_revoked_before(self, cutoff: datetime) -> int:
        stmt = delete(RefreshToken).where(
            or_(
                RefreshToken.status == RefreshTokenStatus.rotated,
                RefreshToken.status == RefreshTokenStatus.revoked,
            ),
            RefreshToken.revoked_at < cutoff,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
