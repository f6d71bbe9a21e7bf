from __future__ import annotations

import json as _json
import math

import httpx
import pytest

from character_figure.providers import Context7Service, UpstashVectorClient, generate_simple_vector
from character_figure.providers.errors import ProviderError


class _FakeUpstash:
    """In-memory stand-in for the Upstash Vector REST endpoints."""

    def __init__(self) -> None:
        self.vectors: dict[str, dict] = {}
        self.requests: list[tuple[str, object]] = []
        self.fail_query = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = _json.loads(request.content)
        path = request.url.path.strip("/")
        self.requests.append((path, body))
        assert request.headers["authorization"] == "Bearer upstash-token"
        if path == "upsert":
            self.vectors[body["id"]] = body["metadata"]
            return httpx.Response(200, json={"result": "Success"})
        if path == "query":
            if self.fail_query:
                return httpx.Response(500, text="down")
            user = body["filter"].split("'")[1]
            matches = [
                {"id": vid, "score": 1.0, "metadata": meta}
                for vid, meta in self.vectors.items()
                if meta["user_uuid"] == user
            ]
            # newest first, like a tie-broken similarity ranking
            return httpx.Response(200, json={"result": list(reversed(matches))[: body["topK"]]})
        if path == "delete":
            for vid in body:
                self.vectors.pop(vid, None)
            return httpx.Response(200, json={"result": {"deleted": len(body)}})
        return httpx.Response(404)


@pytest.fixture
def upstash() -> _FakeUpstash:
    return _FakeUpstash()


@pytest.fixture
def service(upstash) -> Context7Service:
    index = UpstashVectorClient(
        "http://mock-upstash",
        token="upstash-token",
        client=httpx.AsyncClient(transport=httpx.MockTransport(upstash.handler)),
    )
    return Context7Service(index)


class TestSimpleVector:
    def test_is_normalised_and_deterministic(self):
        vector = generate_simple_vector("anime knight")

        assert len(vector) == 1536
        assert math.isclose(math.sqrt(sum(v * v for v in vector)), 1.0)
        assert vector == generate_simple_vector("anime knight")
        assert vector != generate_simple_vector("realistic knight")

    def test_empty_text_is_zero_vector(self):
        assert set(generate_simple_vector("", dimension=8)) == {0.0}


class TestLimitedMode:
    async def test_reads_and_writes_are_noops(self):
        service = Context7Service()

        assert service.enabled is False
        assert await service.store_context("u-1", "hello") == ""
        assert await service.retrieve_context("u-1", "hello") == []
        assert await service.clear_user_context("u-1") == 0
        assert await service.get_user_preferences("u-1") is None
        assert await service.enhance_prompt("u-1", "a knight") == "a knight"
        assert await service.get_user_stats("u-1") == {"total_contexts": 0, "preferences": 0, "sessions": 0, "memories": 0}


class TestContext7Service:
    async def test_store_and_retrieve(self, service, upstash):
        context_id = await service.store_context("u-1", "likes silver armour", {"type": "memory", "source": "chat"})
        await service.store_context("u-2", "someone else")

        records = await service.retrieve_context("u-1", "armour")

        assert context_id.startswith("ctx_")
        assert [r.id for r in records] == [context_id]
        assert records[0].content == "likes silver armour"
        assert records[0].type == "memory"
        assert records[0].metadata["source"] == "chat"
        query_body = [body for path, body in upstash.requests if path == "query"][0]
        assert query_body["filter"] == "user_uuid = 'u-1'"
        assert query_body["includeMetadata"] is True

    async def test_default_type_is_history(self, service, upstash):
        context_id = await service.store_context("u-1", "text")

        assert upstash.vectors[context_id]["type"] == "history"

    async def test_preferences_round_trip(self, service):
        await service.store_user_preferences("u-1", {"generation_style": "anime"})

        assert await service.get_user_preferences("u-1") == {"generation_style": "anime"}

    async def test_session_history_only_returns_sessions(self, service):
        await service.store_context("u-1", "a note", {"type": "memory"})
        await service.store_session_history("u-1", "a knight", "img-1", {"model": "nano-banana", "style": "fantasy"})

        history = await service.get_session_history("u-1")

        assert history == [{"prompt": "a knight", "response": "img-1", "model": "nano-banana", "style": "fantasy"}]

    async def test_enhance_prompt(self, service):
        await service.store_user_preferences("u-1", {"generation_style": "anime"})

        enhanced = await service.enhance_prompt("u-1", "a knight")

        assert enhanced.startswith("Related context:\n")
        assert enhanced.endswith("Current request:\na knight\n\nPreferred style: anime")

    async def test_clear_by_type_and_stats(self, service, upstash):
        await service.store_context("u-1", "a note", {"type": "memory"})
        await service.store_session_history("u-1", "p", "r")
        await service.store_user_preferences("u-1", {"generation_style": "anime"})

        assert await service.get_user_stats("u-1") == {"total_contexts": 3, "preferences": 1, "sessions": 1, "memories": 1}
        assert await service.clear_user_context("u-1", "memory") == 1
        assert await service.get_user_stats("u-1") == {"total_contexts": 2, "preferences": 1, "sessions": 1, "memories": 0}
        assert await service.clear_user_context("u-1") == 2
        assert upstash.vectors == {}

    async def test_search_context_shape(self, service):
        context_id = await service.store_context("u-1", "castle backgrounds", {"type": "memory"})

        results = await service.search_context("u-1", "castle")

        assert results[0]["id"] == context_id
        assert results[0]["type"] == "memory"
        assert results[0]["timestamp"]

    async def test_retrieve_swallows_index_failures(self, service, upstash):
        upstash.fail_query = True

        assert await service.retrieve_context("u-1", "anything") == []

    async def test_store_propagates_index_failures(self):
        index = UpstashVectorClient(
            "http://mock-upstash",
            token="upstash-token",
            client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503))),
        )

        with pytest.raises(ProviderError):
            await Context7Service(index).store_context("u-1", "x")
