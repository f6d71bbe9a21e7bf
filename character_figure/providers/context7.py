"""Context7: per-user context memory on an Upstash Vector index.

Contexts (preferences, session history, manual memories) are stored as
vectors whose metadata carries the original text. Vectors come from a
deterministic character hash rather than an embedding model, so retrieval is
closer to a keyed lookup than a semantic search.

Without ``UPSTASH_VECTOR_URL``/``UPSTASH_VECTOR_TOKEN`` the service runs in
limited mode: writes return ``""`` and reads return ``[]``.
"""

from __future__ import annotations

import json
import logging
import math
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .errors import ProviderError

VECTOR_DIMENSION = 1536
CONTEXT_TYPES = ("preference", "history", "session", "memory")


def generate_simple_vector(text: str, dimension: int = VECTOR_DIMENSION) -> List[float]:
    """Hash ``text`` into an L2-normalised vector of ``dimension`` floats."""
    vector = [0.0] * dimension
    for i, char in enumerate(text):
        code = ord(char)
        idx = (code * (i + 1)) % dimension
        vector[idx] = (vector[idx] + code / 255) / 2
    magnitude = math.sqrt(sum(v * v for v in vector))
    if magnitude > 0:
        vector = [v / magnitude for v in vector]
    return vector


def _context_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"ctx_{int(time.time() * 1000)}_{suffix}"


@dataclass
class ContextRecord:
    id: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> Optional[str]:
        return self.metadata.get("type")


class UpstashVectorClient:
    """Minimal REST client for the Upstash Vector ``upsert``/``query``/``delete`` endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _post(self, path: str, body: Any) -> Any:
        try:
            r = await self._client.post(
                f"{self.base_url}/{path}",
                headers={"Authorization": f"Bearer {self.token}"},
                json=body,
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Upstash {path} failed: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.TransportError as e:
            raise ProviderError(f"Upstash {path} failed: {e}", code="CONNECTION_ERROR") from e
        payload = r.json()
        if isinstance(payload, dict) and payload.get("error"):
            raise ProviderError(str(payload["error"]), details=payload)
        return payload.get("result") if isinstance(payload, dict) else payload

    async def upsert(self, vector_id: str, vector: List[float], metadata: Dict[str, Any]) -> None:
        await self._post("upsert", {"id": vector_id, "vector": vector, "metadata": metadata})

    async def query(
        self, vector: List[float], *, top_k: int, filter: Optional[str] = None, include_metadata: bool = True
    ) -> List[Dict[str, Any]]:
        body: Dict[str, Any] = {"vector": vector, "topK": top_k, "includeMetadata": include_metadata}
        if filter:
            body["filter"] = filter
        return await self._post("query", body) or []

    async def delete(self, ids: List[str]) -> int:
        result = await self._post("delete", ids)
        if isinstance(result, dict):
            return int(result.get("deleted", len(ids)))
        return len(ids)

    async def aclose(self) -> None:
        await self._client.aclose()


class Context7Service:
    """
    User context store.

    Responsibilities:
    - store_context / retrieve_context
    - preferences and session history on top of the generic store
    - enhance_prompt (prefix related contexts to a prompt)
    - clear_user_context / get_user_stats
    """

    def __init__(self, index: Optional[UpstashVectorClient] = None) -> None:
        self._index = index
        self._logger = logging.getLogger(__name__)
        if index is None:
            self._logger.warning("Context7: Upstash credentials not configured, running in limited mode")

    @property
    def enabled(self) -> bool:
        return self._index is not None

    async def store_context(self, user_uuid: str, content: str, metadata: Optional[Dict[str, Any]] = None) -> str:
        if self._index is None:
            self._logger.warning("Context7: service not initialized, context not stored")
            return ""
        meta = dict(metadata or {})
        context_id = _context_id()
        stored = {
            "user_uuid": user_uuid,
            "type": meta.pop("type", None) or "history",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **meta,
            "content": content,
        }
        await self._index.upsert(context_id, generate_simple_vector(content), stored)
        self._logger.debug("Context7: stored context %s for user %s", context_id, user_uuid)
        return context_id

    async def retrieve_context(self, user_uuid: str, query: str, top_k: int = 5) -> List[ContextRecord]:
        if self._index is None:
            self._logger.warning("Context7: service not initialized, returning no context")
            return []
        try:
            results = await self._index.query(
                generate_simple_vector(query), top_k=top_k, filter=f"user_uuid = '{user_uuid}'"
            )
        except ProviderError as e:
            self._logger.error("Context7: failed to retrieve context: %s", e.message)
            return []
        records = []
        for item in results:
            metadata = item.get("metadata") or {}
            records.append(ContextRecord(id=str(item.get("id")), content=metadata.get("content") or "", metadata=metadata))
        return records

    async def store_user_preferences(self, user_uuid: str, preferences: Dict[str, Any]) -> str:
        return await self.store_context(
            user_uuid, json.dumps(preferences), {"type": "preference", "preference_version": "1.0"}
        )

    async def get_user_preferences(self, user_uuid: str) -> Optional[Dict[str, Any]]:
        contexts = await self.retrieve_context(user_uuid, "user preferences settings", 1)
        if contexts and contexts[0].type == "preference":
            try:
                return json.loads(contexts[0].content)
            except ValueError:
                return None
        return None

    async def store_session_history(
        self, user_uuid: str, prompt: str, response: str, metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        meta = metadata or {}
        content = json.dumps({"prompt": prompt, "response": response, **meta})
        return await self.store_context(
            user_uuid,
            content,
            {"type": "session", "model": meta.get("model"), "provider": meta.get("provider")},
        )

    async def get_session_history(self, user_uuid: str, limit: int = 10) -> List[Dict[str, Any]]:
        history = []
        for ctx in await self.retrieve_context(user_uuid, "session history", limit):
            if ctx.type != "session":
                continue
            try:
                history.append(json.loads(ctx.content))
            except ValueError:
                continue
        return history

    async def search_context(self, user_uuid: str, query: str, top_k: int = 5) -> List[Dict[str, Any]]:
        return [
            {"id": ctx.id, "content": ctx.content, "type": ctx.type, "timestamp": ctx.metadata.get("timestamp")}
            for ctx in await self.retrieve_context(user_uuid, query, top_k)
        ]

    async def enhance_prompt(self, user_uuid: str, prompt: str) -> str:
        contexts = await self.retrieve_context(user_uuid, prompt, 3)
        preferences = await self.get_user_preferences(user_uuid)
        enhanced = prompt
        if contexts:
            summary = "\n".join(ctx.content for ctx in contexts)
            enhanced = f"Related context:\n{summary}\n\nCurrent request:\n{prompt}"
        if preferences and preferences.get("generation_style"):
            enhanced += f"\n\nPreferred style: {preferences['generation_style']}"
        return enhanced

    async def clear_user_context(self, user_uuid: str, context_type: Optional[str] = None) -> int:
        if self._index is None:
            self._logger.warning("Context7: service not initialized, nothing to clear")
            return 0
        contexts = await self.retrieve_context(user_uuid, "", 100)
        ids = [ctx.id for ctx in contexts if context_type is None or ctx.type == context_type]
        if not ids:
            return 0
        deleted = await self._index.delete(ids)
        self._logger.info("Context7: cleared %d contexts for user %s", deleted, user_uuid)
        return deleted

    async def get_user_stats(self, user_uuid: str) -> Dict[str, int]:
        contexts = await self.retrieve_context(user_uuid, "", 100)
        return {
            "total_contexts": len(contexts),
            "preferences": sum(1 for c in contexts if c.type == "preference"),
            "sessions": sum(1 for c in contexts if c.type == "session"),
            "memories": sum(1 for c in contexts if c.type == "memory"),
        }
