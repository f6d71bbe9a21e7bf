"""Unit tests for the generation history endpoints."""

from httpx import AsyncClient

HISTORY = "/api/character-figure/history"


class TestListHistory:
    async def test_lists_own_generations(self, client: AsyncClient, auth_headers, user, other_user, make_generation):
        await make_generation(user, style="anime")
        await make_generation(user, style="chibi", is_favorited=True)
        await make_generation(other_user)

        response = await client.get(HISTORY, params={"styles": "chibi"}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [g["request"]["style"] for g in data["history"]] == ["chibi"]
        assert data["user_stats"]["total_generations"] == 2

    async def test_invalid_page(self, client: AsyncClient, auth_headers):
        response = await client.get(HISTORY, params={"page": "0"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "page parameter must be between 1 and 1000"

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get(HISTORY)

        assert response.status_code == 401
        assert response.json()["code"] == -2


class TestGenerationDetail:
    async def test_detail_and_ownership(self, client: AsyncClient, auth_headers, user, other_user, make_generation):
        mine = await make_generation(user)
        theirs = await make_generation(other_user)

        own = await client.get(f"{HISTORY}/{mine.uuid}", headers=auth_headers)
        foreign = await client.get(f"{HISTORY}/{theirs.uuid}", headers=auth_headers)
        missing = await client.get(f"{HISTORY}/missing", headers=auth_headers)

        assert own.json()["data"]["id"] == mine.uuid
        assert foreign.status_code == 403
        assert foreign.json()["message"] == "Access denied"
        assert missing.status_code == 404


class TestUpdateGeneration:
    async def test_toggle_favorite(self, client: AsyncClient, auth_headers, user, make_generation):
        generation = await make_generation(user)

        response = await client.put(
            f"{HISTORY}/{generation.uuid}", json={"action": "toggle_favorite"}, headers=auth_headers
        )

        assert response.json()["data"]["is_favorited"] is True

    async def test_invalid_json(self, client: AsyncClient, auth_headers, user, make_generation):
        generation = await make_generation(user)

        response = await client.put(
            f"{HISTORY}/{generation.uuid}",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid JSON in request body"

    async def test_set_favorite_is_not_implemented(self, client: AsyncClient, auth_headers, user, make_generation):
        generation = await make_generation(user)

        response = await client.put(
            f"{HISTORY}/{generation.uuid}", json={"action": "set_favorite", "value": True}, headers=auth_headers
        )

        assert response.status_code == 501

    async def test_foreign_generation_is_forbidden_before_parsing(
        self, client: AsyncClient, auth_headers, other_user, make_generation
    ):
        theirs = await make_generation(other_user)

        response = await client.put(f"{HISTORY}/{theirs.uuid}", content=b"{not json", headers=auth_headers)

        assert response.status_code == 403


class TestDeleteGeneration:
    async def test_delete_then_gone(self, client: AsyncClient, auth_headers, user, make_generation):
        generation = await make_generation(user)

        deleted = await client.delete(f"{HISTORY}/{generation.uuid}", headers=auth_headers)
        again = await client.get(f"{HISTORY}/{generation.uuid}", headers=auth_headers)

        assert deleted.json()["data"] == {"generation_id": generation.uuid, "deleted": True}
        assert again.status_code == 410

    async def test_bulk_delete(self, client: AsyncClient, auth_headers, user, other_user, make_generation):
        mine = await make_generation(user)
        theirs = await make_generation(other_user)

        response = await client.request(
            "DELETE", HISTORY, json={"generation_ids": [mine.uuid, theirs.uuid]}, headers=auth_headers
        )

        assert response.json()["data"] == {"deleted_count": 1, "requested_count": 2}

    async def test_bulk_delete_needs_ids(self, client: AsyncClient, auth_headers):
        response = await client.request("DELETE", HISTORY, json={"generation_ids": []}, headers=auth_headers)

        assert response.status_code == 400
