"""
Sweep Refresh Tokens Use Case

Storage hygiene: deletes expired records and terminal records past retention.
"""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel

from tenant_auth.app.services.refresh_token_store import RefreshTokenStore
from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.app.services.unit_of_work import UnitOfWork
from tenant_auth.libs.result import Result, Return


class SweepResponse(BaseModel):
    expired_deleted: int
    revoked_deleted: int


class SweepRefreshTokensUseCase:
    """
    Business Rules:
    - Never deletes an ACTIVE record whose expiry is in the future
    - Rotated/revoked records are kept for the retention period so replays
      can still be recognised
    """

    def __init__(self, uow: UnitOfWork, issuer: TokenIssuer, retention_days: int = 30):
        self.uow = uow
        self.issuer = issuer
        self.retention = timedelta(days=retention_days)

    async def execute(self, now: Optional[datetime] = None) -> Result[SweepResponse]:
        now = now or self.issuer.clock()

        async with self.uow:
            store = RefreshTokenStore(self.uow.refresh_tokens, self.issuer, clock=self.issuer.clock)
            expired = await store.sweep_expired(now)
            revoked = await store.sweep_old_revoked(now - self.retention)
            await self.uow.commit()

        return Return.ok(SweepResponse(expired_deleted=expired, revoked_deleted=revoked))
