"""Unit tests for the direct Nano Banana endpoints."""

import pytest
from httpx import AsyncClient

NANO = "/api/nano-banana"


class TestGenerate:
    async def test_generates_and_charges(self, client: AsyncClient, auth_headers, user, grant_credits, vendors):
        await grant_credits(user, 50)

        response = await client.post(
            f"{NANO}/generate", json={"prompt": "a lighthouse", "num_images": 2, "style": "anime"}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["success"] is True
        assert data["credits_used"] == 20
        assert data["credits_remaining"] == 30
        assert data["request_id"] == "nb-req-1"
        assert len(data["images"]) == 2
        assert vendors.requests["nano_banana"][0]["style"] == "anime"

    async def test_insufficient_credits_is_400(self, client: AsyncClient, auth_headers, user, grant_credits):
        await grant_credits(user, 5)

        response = await client.post(f"{NANO}/generate", json={"prompt": "a lighthouse"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Insufficient credits. You need 10 credits but only have 5. Please purchase more credits."
        )

    async def test_too_many_images(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{NANO}/generate", json={"prompt": "a lighthouse", "num_images": 5}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Number of images must be between 1 and 4"

    @pytest.mark.parametrize(
        "status,message",
        [
            (402, "Payment required - Your nano-banana credits may be exhausted."),
            (429, "Rate limit exceeded - Please wait a moment before trying again."),
            (500, "vendor unavailable"),
        ],
    )
    async def test_provider_failures(
        self, client: AsyncClient, auth_headers, user, grant_credits, vendors, status, message
    ):
        await grant_credits(user, 50)
        vendors.nano_banana_status = status

        response = await client.post(f"{NANO}/generate", json={"prompt": "a lighthouse"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == message


async def test_generation_config(client: AsyncClient, auth_headers, user, grant_credits):
    await grant_credits(user, 50)

    response = await client.get(f"{NANO}/generate", headers=auth_headers)

    data = response.json()["data"]
    assert data["user_credits"] == 50
    assert data["credits_per_image"] == 10
    assert data["service_stats"]["total_requests"] == 0
    assert "1:1" in data["available_aspect_ratios"]


class TestEdit:
    async def test_edit_charges_flat_fee(self, client: AsyncClient, auth_headers, user, grant_credits):
        await grant_credits(user, 50)

        response = await client.post(
            f"{NANO}/edit",
            json={"prompt": "make it night", "image_urls": ["https://mock.cdn/a.png", "https://mock.cdn/b.png"]},
            headers=auth_headers,
        )

        data = response.json()["data"]
        assert data["credits_used"] == 10
        assert data["credits_remaining"] == 40
        assert data["input_images"] == 2

    async def test_invalid_url_is_rejected_without_charge(self, client: AsyncClient, auth_headers, user, grant_credits):
        await grant_credits(user, 50)

        response = await client.post(
            f"{NANO}/edit", json={"prompt": "make it night", "image_urls": ["not-a-url"]}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "All image URLs must be valid"
        info = await client.get(f"{NANO}/generate", headers=auth_headers)
        assert info.json()["data"]["user_credits"] == 50
