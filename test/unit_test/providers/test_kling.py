from __future__ import annotations

import json as _json

import httpx
import pytest
from jose import jwt

from character_figure.providers import KlingClient, ProviderConfigurationError, ProviderError, build_api_token

BASE_URL = "http://mock-kling"


def _client(handler, **kwargs) -> KlingClient:
    kwargs.setdefault("access_key", "ak-test")
    kwargs.setdefault("secret_key", "sk-test")
    return KlingClient(BASE_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs)


def test_build_api_token_claims() -> None:
    token = build_api_token("ak-test", "sk-test", now=1_700_000_000)

    claims = jwt.decode(token, "sk-test", algorithms=["HS256"], options={"verify_exp": False, "verify_nbf": False})

    assert claims == {"iss": "ak-test", "exp": 1_700_001_800, "nbf": 1_699_999_995}
    assert jwt.get_unverified_header(token)["typ"] == "JWT"


class TestKlingClient:
    async def test_create_image_to_video(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["auth"] = request.headers["authorization"]
            seen["body"] = _json.loads(request.content)
            return httpx.Response(
                200, json={"code": 0, "message": "ok", "data": {"task_id": "t-1", "task_status": "submitted"}}
            )

        data = await _client(handler).create_image_to_video(
            image="https://mock.cdn/start.png",
            image_tail="https://mock.cdn/end.png",
            prompt="a dancer spins",
            duration=5,
            aspect_ratio="16:9",
            camera_movement="pan_left",
        )

        assert data == {"task_id": "t-1", "task_status": "submitted"}
        assert (seen["method"], seen["path"]) == ("POST", "/v1/videos/image2video")
        token = seen["auth"].removeprefix("Bearer ")
        assert jwt.get_unverified_claims(token)["iss"] == "ak-test"
        assert seen["body"]["duration"] == "5"
        assert seen["body"]["image_tail"] == "https://mock.cdn/end.png"
        assert seen["body"]["camera_control"] == {"type": "pan_left"}

    async def test_static_camera_sends_no_camera_control(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(_json.loads(request.content))
            return httpx.Response(200, json={"code": 0, "data": {"task_id": "t-2"}})

        await _client(handler).create_image_to_video(image="https://mock.cdn/a.png", prompt="p", camera_movement="static")

        assert "camera_control" not in bodies[0]

    async def test_get_image_to_video(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/v1/videos/image2video/t-1"
            return httpx.Response(
                200,
                json={
                    "code": 0,
                    "data": {
                        "task_id": "t-1",
                        "task_status": "succeed",
                        "task_result": {"videos": [{"url": "https://mock.cdn/v.mp4"}]},
                    },
                },
            )

        data = await _client(handler).get_image_to_video("t-1")

        assert data["task_status"] == "succeed"

    async def test_nonzero_code_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"code": 1102, "message": "account balance not enough"})

        with pytest.raises(ProviderError) as exc_info:
            await _client(handler).get_image_to_video("t-1")

        assert exc_info.value.code == "KLING_1102"
        assert exc_info.value.message == "account balance not enough"

    async def test_http_error_raises(self):
        with pytest.raises(ProviderError) as exc_info:
            await _client(lambda request: httpx.Response(401, json={"message": "bad token"})).get_image_to_video("t")

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "bad token"

    async def test_missing_keys(self):
        with pytest.raises(ProviderConfigurationError):
            await _client(lambda request: httpx.Response(200, json={}), secret_key=None).get_image_to_video("t")
