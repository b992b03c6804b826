import pytest
from httpx import AsyncClient


async def _refresh(client: AsyncClient, refresh_token: str):
    return await client.post("/auth/refresh", json={"refreshToken": refresh_token})


@pytest.mark.asyncio
async def test_logout_revokes_single_session(client: AsyncClient, create_user, login):
    await create_user()
    laptop = (await login())["refreshToken"]
    phone = (await login())["refreshToken"]

    response = await client.post("/auth/logout", json={"refreshToken": laptop})

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully", "revokedCount": 1}
    assert (await _refresh(client, laptop)).json()["error"]["code"] == "TOKEN_REVOKED"
    assert (await _refresh(client, phone)).status_code == 200


@pytest.mark.asyncio
async def test_logout_everywhere(client: AsyncClient, create_user, login):
    await create_user()
    laptop = (await login())["refreshToken"]
    phone = (await login())["refreshToken"]

    response = await client.post("/auth/logout", json={"refreshToken": laptop, "everywhere": True})

    assert response.status_code == 200
    assert response.json()["revokedCount"] == 2
    assert (await _refresh(client, phone)).status_code == 401


@pytest.mark.asyncio
async def test_logout_is_idempotent(client: AsyncClient, create_user, login):
    await create_user()
    token = (await login())["refreshToken"]

    first = await client.post("/auth/logout", json={"refreshToken": token})
    second = await client.post("/auth/logout", json={"refreshToken": token})
    unknown = await client.post("/auth/logout", json={"refreshToken": "never-issued"})

    assert first.status_code == second.status_code == unknown.status_code == 200
    assert second.json()["revokedCount"] == 0
    assert unknown.json()["message"] == "Logged out successfully"
