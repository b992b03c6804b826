from datetime import timedelta
from uuid import UUID

import bcrypt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from tenant_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from tenant_auth.api.app import create_app
from tenant_auth.api.limiter import limiter
from tenant_auth.app.services.audit_recorder import AuditRecorder
from tenant_auth.app.services.token_issuer import TokenIssuer
from tenant_auth.depends import get_audit_recorder, get_token_issuer, get_unit_of_work
from tenant_auth.domain.entities import User, UserRole, UserStatus

ADMIN_KEY = "integration-admin-key"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def audit_log():
    return []


@pytest.fixture
def issuer(clock):
    return TokenIssuer(
        secret=ApplicationConfig.JWT_SECRET,
        algorithm=ApplicationConfig.JWT_ALGORITHM,
        issuer=ApplicationConfig.JWT_ISSUER,
        access_token_ttl=timedelta(seconds=ApplicationConfig.ACCESS_TOKEN_TTL_SECONDS),
        refresh_token_ttl=timedelta(seconds=ApplicationConfig.REFRESH_TOKEN_TTL_SECONDS),
        clock=clock,
    )


@pytest_asyncio.fixture
async def recorder(audit_log):
    async def sink(event):
        audit_log.append(event)

    recorder = AuditRecorder(sink, queue_size=100)
    yield recorder
    await recorder.stop()


@pytest_asyncio.fixture
async def client(db_session, issuer, recorder, monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)
    monkeypatch.setattr(ApplicationConfig, "ADMIN_API_KEY", ADMIN_KEY)
    limiter.reset()

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_token_issuer] = lambda: issuer
    app.dependency_overrides[get_audit_recorder] = lambda: recorder

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def create_user(db_session, clock):
    """Provision a user directly in the store and return its id.

    Users are not created through the API.
    """

    async def _create_user(
        tenant_id: str = "1",
        email: str = "a@x.com",
        password: str = "p1",
        role: UserRole = UserRole.user,
        status: UserStatus = UserStatus.active,
    ) -> UUID:
        user = User(
            tenant_id=tenant_id,
            email=email,
            password_hash=bcrypt.hashpw(password.encode(), bcrypt.gensalt(4)).decode(),
            first_name="Test",
            last_name="User",
            role=role,
            status=status,
            created_at=clock(),
        )
        db_session.add(user)
        await db_session.commit()
        return user.id

    return _create_user


@pytest.fixture
def login(client):
    """Log in and return the JSON body"""

    async def _login(email: str = "a@x.com", password: str = "p1", tenant_id: str = "1") -> dict:
        response = await client.post(
            "/auth/login",
            json={"email": email, "password": password},
            headers={"X-Tenant-ID": tenant_id},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login


@pytest.fixture
def admin_key_headers():
    return {"X-Admin-API-Key": ADMIN_KEY}
