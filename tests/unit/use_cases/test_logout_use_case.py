"""
Unit tests for Logout Use Case
"""

from datetime import timedelta

import pytest
from unittest.mock import AsyncMock

from tenant_auth.app.services.token_issuer import hash_refresh_token
from tenant_auth.app.use_cases.auth import LogoutUseCase
from tenant_auth.domain.entities import RefreshToken


@pytest.fixture
def record(make_user, clock):
    user = make_user()
    return user, RefreshToken(
        token_hash=hash_refresh_token("presented"),
        user_id=user.id,
        tenant_id="1",
        expires_at=clock.now + timedelta(days=7),
    )


@pytest.mark.asyncio
async def test_logout_revokes_only_presented_token(mock_uow, issuer, audit, record):
    user, token = record
    mock_uow.refresh_tokens.get_by_token_hash = AsyncMock(return_value=token)
    mock_uow.refresh_tokens.compare_and_swap_status = AsyncMock(return_value=True)
    mock_uow.refresh_tokens.revoke_all_by_user = AsyncMock()
    mock_uow.users.get_by_id_in_tenant = AsyncMock(return_value=user)

    result = await LogoutUseCase(mock_uow, issuer, audit).execute("presented", "1")

    assert result.is_ok()
    assert result.value.revoked_count == 1
    mock_uow.refresh_tokens.revoke_all_by_user.assert_not_called()
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_logout_everywhere_revokes_all_of_owner(mock_uow, issuer, audit, audit_events, record, clock):
    user, token = record
    mock_uow.refresh_tokens.get_by_token_hash = AsyncMock(return_value=token)
    mock_uow.refresh_tokens.revoke_all_by_user = AsyncMock(return_value=3)
    mock_uow.users.get_by_id_in_tenant = AsyncMock(return_value=user)

    result = await LogoutUseCase(mock_uow, issuer, audit).execute("presented", "1", everywhere=True)

    assert result.value.revoked_count == 3
    mock_uow.refresh_tokens.revoke_all_by_user.assert_called_once_with(
        user.id, "1", clock.now, "logout_all"
    )

    await audit.flush()
    assert audit_events[0].action == "logout_all"
    assert audit_events[0].user_email == user.email


@pytest.mark.asyncio
async def test_logout_unknown_token_is_acknowledged(mock_uow, issuer, audit):
    mock_uow.refresh_tokens.get_by_token_hash = AsyncMock(return_value=None)

    result = await LogoutUseCase(mock_uow, issuer, audit).execute("whatever", "1")

    assert result.is_ok()
    assert result.value.message == "Logged out successfully"
    assert result.value.revoked_count == 0
