"""Unit tests for the health, version and ping endpoints."""

from httpx import AsyncClient


async def test_health_check(client: AsyncClient):
    response = await client.get("http://localhost/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_version(client: AsyncClient):
    response = await client.get("http://localhost/api/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "0.1.0"
    assert data["schema_version"] == "v1"


class TestPing:
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/ping")

        assert response.status_code == 401
        assert response.json() == {"code": -2, "message": "no auth"}

    async def test_invalid_token_is_no_auth(self, client: AsyncClient):
        response = await client.get("/api/ping", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401
        assert response.json()["code"] == -2

    async def test_spends_one_credit(self, client: AsyncClient, auth_headers, user, grant_credits):
        await grant_credits(user, 3)

        response = await client.post("/api/ping", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"code": 0, "message": "ok", "data": {"pong": "received", "credits_left": 2}}

    async def test_without_credits(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/ping", headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"code": -1, "message": "insufficient credits", "error": "insufficient credits"}
