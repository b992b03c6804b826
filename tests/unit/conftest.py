import bcrypt
import pytest
from unittest.mock import AsyncMock, MagicMock

from tenant_auth.app.services.audit_recorder import AuditRecorder
from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.domain.entities import User, UserRole, UserStatus

TEST_SECRET = "unit-test-secret"
TEST_ROUNDS = 4  # bcrypt minimum, keeps tests fast


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def issuer(clock):
    return TokenIssuer(secret=TEST_SECRET, clock=clock)


@pytest.fixture
def audit_events():
    return []


@pytest.fixture
def audit(audit_events):
    async def sink(event):
        audit_events.append(event)

    return AuditRecorder(sink, queue_size=100)


@pytest.fixture
def make_user():
    """Factory for in-memory users with a real bcrypt hash"""

    def _make_user(
        password: str = "p1",
        tenant_id: str = "1",
        email: str = "a@x.com",
        role: UserRole = UserRole.user,
        status: UserStatus = UserStatus.active,
    ) -> User:
        return User(
            tenant_id=tenant_id,
            email=email,
            password_hash=bcrypt.hashpw(password.encode(), bcrypt.gensalt(TEST_ROUNDS)).decode(),
            first_name="Ada",
            last_name="Lovelace",
            role=role,
            status=status,
        )

    return _make_user
