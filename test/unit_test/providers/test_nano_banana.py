from __future__ import annotations

import json as _json
from unittest.mock import AsyncMock

import httpx
import pytest

from character_figure.providers import (
    NanoBananaClient,
    NanoBananaService,
    ProviderConfigurationError,
    ProviderError,
    ProviderTimeoutError,
)

BASE_URL = "http://mock-nano-banana"


def _ok_body(n: int = 1) -> dict:
    return {
        "request_id": "req-1",
        "images": [{"url": f"https://mock.cdn/{i}.png", "width": 1024, "height": 1024} for i in range(n)],
        "credits_used": 2 * n,
        "remaining_credits": 98,
        "processing_time": 1.5,
    }


def _client(handler, *, api_key: str | None = "nb-key", sleep=None, max_retries: int = 3) -> NanoBananaClient:
    return NanoBananaClient(
        BASE_URL,
        api_key=api_key,
        max_retries=max_retries,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=sleep or AsyncMock(),
    )


class TestNanoBananaClient:
    async def test_generate_sends_expected_request(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("authorization")
            seen["client"] = request.headers.get("x-client")
            seen["body"] = _json.loads(request.content)
            return httpx.Response(200, json=_ok_body(2))

        data = await _client(handler).generate("  a knight  ", num_images=2, aspect_ratio="3:4", seed=7)

        assert seen["path"] == "/generate"
        assert seen["auth"] == "Bearer nb-key"
        assert seen["client"] == "character-figure"
        assert seen["body"] == {"prompt": "a knight", "num_images": "2", "aspect_ratio": "3:4", "seed": 7}
        assert len(data["images"]) == 2

    async def test_edit_endpoint(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/edit"
            body = _json.loads(request.content)
            assert body["image_urls"] == ["https://mock.cdn/a.png"]
            assert body["edit_type"] == "style"
            return httpx.Response(200, json=_ok_body())

        data = await _client(handler).edit("make it blue", ["https://mock.cdn/a.png"], edit_type="style")

        assert data["request_id"] == "req-1"

    async def test_missing_api_key(self):
        client = _client(lambda request: httpx.Response(200, json={}), api_key=None)

        with pytest.raises(ProviderConfigurationError) as exc_info:
            await client.generate("a knight")
        assert exc_info.value.code == "NOT_CONFIGURED"

    async def test_retries_rate_limit_and_server_errors_with_backoff(self):
        responses = iter([httpx.Response(429), httpx.Response(503), httpx.Response(200, json=_ok_body())])
        sleep = AsyncMock()

        data = await _client(lambda request: next(responses), sleep=sleep).generate("a knight")

        assert data["request_id"] == "req-1"
        assert [c.args[0] for c in sleep.await_args_list] == [1, 2]

    async def test_gives_up_after_max_retries(self):
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            return httpx.Response(500, json={"error": {"message": "boom"}})

        with pytest.raises(ProviderError) as exc_info:
            await _client(handler, max_retries=2).generate("a knight")

        assert calls["n"] == 3
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "boom"

    async def test_client_errors_are_not_retried(self):
        sleep = AsyncMock()

        with pytest.raises(ProviderError) as exc_info:
            await _client(lambda request: httpx.Response(400, json={"message": "bad prompt"}), sleep=sleep).generate(
                "a knight"
            )

        assert exc_info.value.message == "bad prompt"
        assert exc_info.value.code == "HTTP_400"
        sleep.assert_not_awaited()

    async def test_connection_errors_are_retried(self):
        attempts = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["n"] += 1
            if attempts["n"] == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json=_ok_body())

        data = await _client(handler).generate("a knight")

        assert data["images"]
        assert attempts["n"] == 2

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ProviderTimeoutError) as exc_info:
            await _client(handler).generate("a knight")
        assert exc_info.value.code == "TIMEOUT"


class TestNanoBananaService:
    async def test_successful_generation_updates_stats(self):
        service = NanoBananaService(_client(lambda request: httpx.Response(200, json=_ok_body(2))))

        result = await service.generate_image("a knight", num_images=2)

        assert result.success is True
        assert len(result.images) == 2
        assert result.request_id == "req-1"
        assert result.remaining_credits == 98
        stats = service.get_usage_stats()
        assert stats["total_requests"] == 1
        assert stats["successful_requests"] == 1
        assert stats["total_images_generated"] == 2
        assert stats["credits_used"] == 4
        assert stats["credits_remaining"] == 98

    @pytest.mark.parametrize(
        "prompt,num_images,message",
        [
            ("", 1, "Prompt is required for image generation"),
            ("x" * 1001, 1, "Prompt is too long (max 1000 characters)"),
            ("a knight", 5, "Number of images must be between 1 and 4"),
        ],
    )
    async def test_invalid_generation_input(self, prompt, num_images, message):
        handler_called = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            handler_called["n"] += 1
            return httpx.Response(200, json=_ok_body())

        service = NanoBananaService(_client(handler))
        result = await service.generate_image(prompt, num_images=num_images)

        assert result.success is False
        assert result.error == message
        assert result.error_code == "INVALID_REQUEST"
        assert handler_called["n"] == 0
        assert service.get_usage_stats()["failed_requests"] == 0

    @pytest.mark.parametrize(
        "image_urls,message",
        [
            ([], "At least one image URL is required for editing"),
            ([f"https://mock.cdn/{i}.png" for i in range(6)], "Maximum 5 images can be edited at once"),
            (["not-a-url"], "All image URLs must be valid"),
        ],
    )
    async def test_invalid_edit_input(self, image_urls, message):
        service = NanoBananaService(_client(lambda request: httpx.Response(200, json=_ok_body())))

        result = await service.edit_image("recolor", image_urls)

        assert result.success is False
        assert result.error == message

    async def test_vendor_failure_is_folded_into_result(self):
        service = NanoBananaService(
            _client(lambda request: httpx.Response(402, json={"error": "insufficient vendor credits"}))
        )

        result = await service.generate_image("a knight")

        assert result.success is False
        assert result.status_code == 402
        assert result.error == "insufficient vendor credits"
        assert result.to_dict()["data"] == {"error": "insufficient vendor credits"}
        stats = service.get_usage_stats()
        assert stats["total_requests"] == 1
        assert stats["failed_requests"] == 1
