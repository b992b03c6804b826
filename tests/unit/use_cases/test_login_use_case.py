"""
Unit tests for Login Use Case
"""

import pytest
from unittest.mock import AsyncMock

from tenant_auth.app.use_cases.auth import LoginCommand, LoginUseCase
from tenant_auth.app.services.audit_recorder import RequestMetadata
from tenant_auth.domain.entities import RefreshTokenStatus, UserRole, UserStatus


def _wire(mock_uow, user):
    mock_uow.users.get_by_tenant_and_email = AsyncMock(return_value=user)
    mock_uow.users.update = AsyncMock(side_effect=lambda u: u)
    mock_uow.refresh_tokens.create = AsyncMock(side_effect=lambda token: token)


@pytest.mark.asyncio
async def test_login_success(mock_uow, issuer, audit, audit_events, make_user, clock):
    user = make_user(password="p1", role=UserRole.project_manager)
    _wire(mock_uow, user)

    use_case = LoginUseCase(mock_uow, issuer, audit, bcrypt_rounds=4)
    result = await use_case.execute(
        LoginCommand(tenant_id="1", email="a@x.com", password="p1"),
        RequestMetadata(ip_address="10.0.0.1", user_agent="pytest"),
    )

    assert result.is_ok()
    response = result.value
    assert response.token_type == "Bearer"
    assert response.expires_in == 900
    assert response.user.id == str(user.id)
    assert response.user.role == "PROJECT_MANAGER"
    assert response.user.tenant_id == "1"
    assert issuer.validate_access_token(response.access_token).is_ok()

    stored = mock_uow.refresh_tokens.create.call_args.args[0]
    assert stored.status == RefreshTokenStatus.active
    assert stored.token_hash != response.refresh_token
    assert stored.device_info == "pytest"
    assert user.last_login_at == clock.now
    mock_uow.commit.assert_called_once()

    await audit.flush()
    assert audit_events[0].action == "login"
    assert audit_events[0].success is True
    assert audit_events[0].user_id == user.id


@pytest.mark.asyncio
async def test_login_wrong_password(mock_uow, issuer, audit, audit_events, make_user):
    _wire(mock_uow, make_user(password="p1"))

    use_case = LoginUseCase(mock_uow, issuer, audit, bcrypt_rounds=4)
    result = await use_case.execute(LoginCommand(tenant_id="1", email="a@x.com", password="wrong"))

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"
    mock_uow.refresh_tokens.create.assert_not_called()
    mock_uow.commit.assert_not_called()

    await audit.flush()
    assert audit_events[0].success is False
    assert "INVALID_CREDENTIALS" in audit_events[0].error_message
    assert audit_events[0].event_metadata == {"email": "a@x.com"}


@pytest.mark.asyncio
async def test_login_unknown_user(mock_uow, issuer, audit):
    _wire(mock_uow, None)

    use_case = LoginUseCase(mock_uow, issuer, audit, bcrypt_rounds=4)
    result = await use_case.execute(LoginCommand(tenant_id="1", email="ghost@x.com", password="p1"))

    assert result.error.code == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_suspended_user(mock_uow, issuer, audit, make_user):
    _wire(mock_uow, make_user(password="p1", status=UserStatus.suspended))

    use_case = LoginUseCase(mock_uow, issuer, audit, bcrypt_rounds=4)
    result = await use_case.execute(LoginCommand(tenant_id="1", email="a@x.com", password="p1"))

    assert result.error.code == "ACCOUNT_DISABLED"
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_login_looks_up_requested_tenant_only(mock_uow, issuer, audit):
    _wire(mock_uow, None)

    use_case = LoginUseCase(mock_uow, issuer, audit, bcrypt_rounds=4)
    await use_case.execute(LoginCommand(tenant_id="acme", email="a@x.com", password="p1"))

    mock_uow.users.get_by_tenant_and_email.assert_called_once_with("acme", "a@x.com")
