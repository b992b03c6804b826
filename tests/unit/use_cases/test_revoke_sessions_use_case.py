"""
Unit tests for Revoke Sessions Use Case
"""

import pytest
from unittest.mock import AsyncMock
from uuid import uuid4

from tenant_auth.app.use_cases.sessions import RevokeSessionsUseCase
from tenant_auth.domain.entities import AuditSeverity, UserRole


@pytest.mark.asyncio
async def test_revoke_all_sessions_self_success(mock_uow, issuer, audit, audit_events, make_user, clock):
    """User revoking their own sessions"""
    user = make_user()
    mock_uow.users.get_by_id_in_tenant = AsyncMock(return_value=user)
    mock_uow.refresh_tokens.revoke_all_by_user = AsyncMock(return_value=3)

    use_case = RevokeSessionsUseCase(mock_uow, issuer, audit)
    result = await use_case.revoke_all_sessions(
        target_user_id=user.id,
        requesting_user_id=user.id,
        tenant_id="1",
        requesting_role=UserRole.user.value,
    )

    assert result.is_ok()
    assert result.value["revoked_count"] == 3
    assert result.value["target_user_id"] == str(user.id)
    mock_uow.refresh_tokens.revoke_all_by_user.assert_called_once_with(user.id, "1", clock.now, "logout_all")
    mock_uow.commit.assert_called_once()

    await audit.flush()
    assert audit_events[0].severity == AuditSeverity.high
    assert audit_events[0].event_metadata["is_self"] is True


@pytest.mark.asyncio
async def test_revoke_all_sessions_admin_success(mock_uow, issuer, audit, make_user, clock):
    """Admin revoking another user's sessions"""
    target = make_user()
    mock_uow.users.get_by_id_in_tenant = AsyncMock(return_value=target)
    mock_uow.refresh_tokens.revoke_all_by_user = AsyncMock(return_value=2)

    use_case = RevokeSessionsUseCase(mock_uow, issuer, audit)
    result = await use_case.revoke_all_sessions(
        target_user_id=target.id,
        requesting_user_id=uuid4(),
        tenant_id="1",
        requesting_role=UserRole.admin,
    )

    assert result.is_ok()
    mock_uow.refresh_tokens.revoke_all_by_user.assert_called_once_with(target.id, "1", clock.now, "admin_revoked")


@pytest.mark.asyncio
async def test_revoke_all_sessions_forbidden(mock_uow, issuer, audit):
    """Project managers cannot revoke other users' sessions"""
    use_case = RevokeSessionsUseCase(mock_uow, issuer, audit)
    result = await use_case.revoke_all_sessions(
        target_user_id=uuid4(),
        requesting_user_id=uuid4(),
        tenant_id="1",
        requesting_role=UserRole.project_manager.value,
    )

    assert result.is_err()
    assert result.error.code == "FORBIDDEN"
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_all_sessions_user_not_in_tenant(mock_uow, issuer, audit):
    mock_uow.users.get_by_id_in_tenant = AsyncMock(return_value=None)
    target_id = uuid4()

    use_case = RevokeSessionsUseCase(mock_uow, issuer, audit)
    result = await use_case.revoke_all_sessions(
        target_user_id=target_id,
        requesting_user_id=uuid4(),
        tenant_id="2",
        requesting_role=UserRole.super_admin.value,
    )

    assert result.error.code == "USER_NOT_FOUND"
    mock_uow.users.get_by_id_in_tenant.assert_called_once_with(target_id, "2")
