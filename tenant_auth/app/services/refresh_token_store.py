"""
Refresh Token Store

Rotation state machine over persisted refresh-token records:

    active --rotate--> rotated   (terminal)
    active --revoke--> revoked   (terminal)
    active --time----> expired   (derived from expires_at at read time)

All state changes go through the repository's conditional update, so two
callers racing on one record can never both win.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID, uuid4

from tenant_auth.app.repositories.refresh_token_repository import IRefreshTokenRepository
from tenant_auth.app.services.token_issuer import TokenIssuer, hash_refresh_token
from tenant_auth.domain.base import utc_now
from tenant_auth.domain.entities import RefreshToken, RefreshTokenStatus, User
from tenant_auth.domain.errors import (
    TOKEN_EXPIRED,
    TOKEN_NOT_FOUND,
    TOKEN_REPLAY_DETECTED,
    TOKEN_REVOKED,
)
from tenant_auth.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

REASON_ROTATED = "rotated"
REASON_REPLAY = "replay_detected"
REASON_LOGOUT = "logout"
REASON_LOGOUT_ALL = "logout_all"
REASON_PASSWORD_CHANGED = "password_changed"
REASON_ADMIN = "admin_revoked"


@dataclass
class IssuedRefreshToken:
    """Cleartext token (returned once, never stored) plus its record"""

    token: str
    record: RefreshToken

    @property
    def expires_at(self) -> datetime:
        return self.record.expires_at


@dataclass
class RotationOutcome:
    previous: RefreshToken
    successor: IssuedRefreshToken


class RefreshTokenStore:
    """
    Refresh-token lifecycle on top of IRefreshTokenRepository.

    The store does not commit; callers own the unit of work so that the
    rotated record and its successor land in the same transaction.
    """

    def __init__(
        self,
        repository: IRefreshTokenRepository,
        issuer: TokenIssuer,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.issuer = issuer
        self.clock = clock

    async def issue(
        self,
        user: User,
        tenant_id: str,
        family_id: Optional[UUID] = None,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> IssuedRefreshToken:
        """Create an ACTIVE record. A new family is started unless one is given."""
        token, expires_at = self.issuer.issue_refresh_token()
        record = RefreshToken(
            token_hash=hash_refresh_token(token),
            user_id=user.id,
            tenant_id=tenant_id,
            family_id=family_id or uuid4(),
            status=RefreshTokenStatus.active,
            device_info=device_info,
            ip_address=ip_address,
            created_at=self.clock(),
            expires_at=expires_at,
        )
        record = await self.repository.create(record)
        return IssuedRefreshToken(token=token, record=record)

    async def rotate(
        self,
        presented_token: str,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Result[RotationOutcome]:
        """
        Exchange a refresh token for its successor.

        Args:
            presented_token: Cleartext refresh token from the client
            device_info: User agent of the refreshing client
            ip_address: Client address

        Returns:
            Result with RotationOutcome, or Error TOKEN_NOT_FOUND /
            TOKEN_REVOKED / TOKEN_EXPIRED / TOKEN_REPLAY_DETECTED
        """
        record = await self.lookup(presented_token)
        if record is None:
            return Return.err(Error(TOKEN_NOT_FOUND, "Refresh token not found"))

        now = self.clock()
        failure = await self._check_usable(record, now)
        if failure is not None:
            return Return.err(failure)

        successor_token, expires_at = self.issuer.issue_refresh_token()
        successor = RefreshToken(
            token_hash=hash_refresh_token(successor_token),
            user_id=record.user_id,
            tenant_id=record.tenant_id,
            family_id=record.family_id,
            status=RefreshTokenStatus.active,
            device_info=device_info or record.device_info,
            ip_address=ip_address or record.ip_address,
            created_at=now,
            expires_at=expires_at,
        )

        won = await self.repository.compare_and_swap_status(
            record.id,
            expected=RefreshTokenStatus.active,
            new=RefreshTokenStatus.rotated,
            revoked_at=now,
            reason=REASON_ROTATED,
            replaced_by_id=successor.id,
        )
        if not won:
            # Someone else moved the record first: rotated by a concurrent
            # caller, or revoked in between.
            current = await self.repository.get_by_token_hash(record.token_hash)
            return Return.err(await self._classify_reuse(current or record, now))

        successor = await self.repository.create(successor)
        record.status = RefreshTokenStatus.rotated
        record.revoked = True
        record.revoked_at = now
        record.revocation_reason = REASON_ROTATED
        record.replaced_by_id = successor.id

        return Return.ok(
            RotationOutcome(
                previous=record,
                successor=IssuedRefreshToken(token=successor_token, record=successor),
            )
        )

    async def revoke_all(self, user_id: UUID, tenant_id: str, reason: str = REASON_LOGOUT_ALL) -> int:
        count = await self.repository.revoke_all_by_user(user_id, tenant_id, self.clock(), reason)
        logger.info(f"Revoked {count} refresh tokens for user {user_id} in tenant {tenant_id}")
        return count

    async def lookup(self, presented_token: str) -> Optional[RefreshToken]:
        return await self.repository.get_by_token_hash(hash_refresh_token(presented_token))

    async def revoke_one(self, presented_token: str, reason: str = REASON_LOGOUT) -> bool:
        """
        Revoke a single ACTIVE token, leaving the user's other sessions intact.

        Returns:
            True if this call revoked it; False for unknown or terminal tokens
        """
        record = await self.lookup(presented_token)
        if record is None:
            return False

        now = self.clock()
        revoked = await self.repository.compare_and_swap_status(
            record.id,
            expected=RefreshTokenStatus.active,
            new=RefreshTokenStatus.revoked,
            revoked_at=now,
            reason=reason,
        )
        if revoked:
            record.status = RefreshTokenStatus.revoked
            record.revoked = True
            record.revoked_at = now
            record.revocation_reason = reason
        return revoked

    async def sweep_expired(self, now: Optional[datetime] = None) -> int:
        count = await self.repository.delete_expired(now or self.clock())
        logger.info(f"Swept {count} expired refresh tokens")
        return count

    async def sweep_old_revoked(self, cutoff: datetime) -> int:
        count = await self.repository.delete_revoked_before(cutoff)
        logger.info(f"Swept {count} refresh tokens revoked before {cutoff.isoformat()}")
        return count

    async def _check_usable(self, record: RefreshToken, now: datetime) -> Optional[Error]:
        if record.status == RefreshTokenStatus.rotated:
            return await self._classify_reuse(record, now)
        if record.status == RefreshTokenStatus.revoked:
            return Error(TOKEN_REVOKED, "Refresh token has been revoked")
        if record.is_expired(now):
            return Error(TOKEN_EXPIRED, "Refresh token has expired")
        return None

    async def _classify_reuse(self, record: RefreshToken, now: datetime) -> Error:
        """
        Decide what presenting a no-longer-active token means.

        A chain whose newest token was revoked by logout, password change or
        an admin is simply closed; reusing an old link of it is not theft.
        A chain that is still live, or already killed as a replay, is.
        """
        tip = await self._chain_tip(record)
        if tip.status == RefreshTokenStatus.revoked and tip.revocation_reason != REASON_REPLAY:
            return Error(TOKEN_REVOKED, "Refresh token has been revoked")
        return await self._replay_detected(record, now)

    async def _chain_tip(self, record: RefreshToken) -> RefreshToken:
        seen = {record.id}
        current = record
        while current.replaced_by_id is not None and current.replaced_by_id not in seen:
            successor = await self.repository.get_by_id(current.replaced_by_id)
            if successor is None:
                # Not created yet by a concurrent winner, or already swept
                break
            seen.add(successor.id)
            current = successor
        return current

    async def _replay_detected(self, record: RefreshToken, now: datetime) -> Error:
        revoked = await self.repository.revoke_family(record.family_id, now, REASON_REPLAY)
        logger.warning(
            f"Refresh token replay detected for user {record.user_id} in tenant "
            f"{record.tenant_id}; revoked {revoked} tokens of family {record.family_id}"
        )
        return Error(TOKEN_REPLAY_DETECTED, "Refresh token reuse detected")
