"""
Unit tests for Get Audit Events Use Case
"""

import pytest
from unittest.mock import AsyncMock
from uuid import uuid4

from tenant_auth.app.use_cases.audit import GetAuditEventsUseCase
from tenant_auth.domain.entities import AuditEvent, UserRole


@pytest.mark.asyncio
async def test_admin_gets_tenant_events(mock_uow):
    event = AuditEvent(tenant_id="1", user_id=uuid4(), user_email="a@x.com", action="login")
    mock_uow.audit_events.get_by_tenant_paginated = AsyncMock(return_value=([event], "next"))

    result = await GetAuditEventsUseCase(mock_uow).execute(tenant_id="1", role=UserRole.admin)

    assert result.is_ok()
    assert result.value["next_cursor"] == "next"
    assert result.value["events"][0]["action"] == "login"
    assert result.value["events"][0]["user_email"] == "a@x.com"
    mock_uow.audit_events.get_by_tenant_paginated.assert_called_once_with(
        "1", limit=50, cursor=None, action=None
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [UserRole.user, UserRole.project_manager])
async def test_below_admin_is_rejected(mock_uow, role):
    mock_uow.audit_events.get_by_tenant_paginated = AsyncMock()

    result = await GetAuditEventsUseCase(mock_uow).execute(tenant_id="1", role=role.value)

    assert result.error.code == "INSUFFICIENT_ROLE"
    mock_uow.audit_events.get_by_tenant_paginated.assert_not_called()


@pytest.mark.asyncio
async def test_page_size_is_capped(mock_uow):
    mock_uow.audit_events.get_by_tenant_paginated = AsyncMock(return_value=([], None))

    await GetAuditEventsUseCase(mock_uow).execute(tenant_id="1", role="SUPER_ADMIN", limit=10_000)

    assert mock_uow.audit_events.get_by_tenant_paginated.call_args.kwargs["limit"] == 200
