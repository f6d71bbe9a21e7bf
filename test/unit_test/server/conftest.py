"""Test configuration for server unit tests.

The in-memory SQLite ``session`` and ``user`` fixtures come from
``test/unit_test/conftest.py``. This module adds vendor clients backed by
``httpx.MockTransport`` and an HTTP client bound to the FastAPI app.
"""

import json as _json
from dataclasses import dataclass, field
from datetime import timedelta
from typing import AsyncGenerator, Awaitable, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.character_generations import CharacterGeneration
from character_figure.core.database.entities.users import User
from character_figure.core.database.repositories import CharacterGenerationRepository
from character_figure.core.models.domain import CreditsTransType
from character_figure.core.utils import get_uuid, utc_now
from character_figure.providers import (
    Context7Service,
    CreemClient,
    KlingClient,
    NanoBananaClient,
    NanoBananaService,
    OpenRouterClient,
    SiliconFlowClient,
)
from character_figure.server.services.auth import create_access_token
from character_figure.server.services.credits import increase_credits
from character_figure.server.services.rate_limit import generation_limiter


@dataclass
class MockVendors:
    """Scriptable state behind the mock vendor transports."""

    nano_banana_status: int = 200
    nano_banana_error: str = "vendor unavailable"
    creem_status: int = 200
    creem_checkout_url: str = "https://mock.creem/checkout/ch_1"
    creem_unreachable: bool = False
    kling_task_status: str = "processing"
    requests: Dict[str, List[dict]] = field(default_factory=lambda: {"nano_banana": [], "kling": [], "creem": []})

    def nano_banana_handler(self, request: httpx.Request) -> httpx.Response:
        body = _json.loads(request.content)
        self.requests["nano_banana"].append(body)
        if self.nano_banana_status != 200:
            return httpx.Response(self.nano_banana_status, json={"error": self.nano_banana_error})
        n = int(body.get("num_images", "1"))
        index = len(self.requests["nano_banana"])
        return httpx.Response(
            200,
            json={
                "request_id": f"nb-req-{index}",
                "images": [
                    {"url": f"https://mock.cdn/nb-{index}-{i}.png", "width": 1024, "height": 1024} for i in range(n)
                ],
                "credits_used": n,
                "remaining_credits": 100,
            },
        )

    def kling_handler(self, request: httpx.Request) -> httpx.Response:
        self.requests["kling"].append({"method": request.method, "path": request.url.path})
        if request.method == "POST":
            return httpx.Response(
                200, json={"code": 0, "data": {"task_id": "kling-task-1", "task_status": "submitted"}}
            )
        data: dict = {"task_id": "kling-task-1", "task_status": self.kling_task_status}
        if self.kling_task_status == "succeed":
            data["task_result"] = {"videos": [{"url": "https://mock.cdn/video.mp4"}]}
        if self.kling_task_status == "failed":
            data["task_status_msg"] = "content policy"
        return httpx.Response(200, json={"code": 0, "data": data})

    def creem_handler(self, request: httpx.Request) -> httpx.Response:
        body = _json.loads(request.content) if request.content else {}
        self.requests["creem"].append(body)
        if self.creem_unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if self.creem_status != 200:
            return httpx.Response(self.creem_status, json={"message": "creem is down"})
        return httpx.Response(200, json={"id": "ch_1", "checkout_url": self.creem_checkout_url})


@pytest.fixture
def vendors() -> MockVendors:
    return MockVendors()


@pytest.fixture
def nano_banana(vendors: MockVendors) -> NanoBananaService:
    client = NanoBananaClient(
        "http://mock-nano-banana",
        api_key="nb-test-key",
        max_retries=0,
        client=httpx.AsyncClient(transport=httpx.MockTransport(vendors.nano_banana_handler)),
        sleep=AsyncMock(),
    )
    return NanoBananaService(client)


@pytest.fixture
def kling(vendors: MockVendors) -> KlingClient:
    return KlingClient(
        "http://mock-kling",
        access_key="ak-test",
        secret_key="sk-test",
        client=httpx.AsyncClient(transport=httpx.MockTransport(vendors.kling_handler)),
    )


@pytest.fixture
def creem(vendors: MockVendors) -> CreemClient:
    return CreemClient(
        "http://mock-creem",
        api_key="creem-test-key",
        client=httpx.AsyncClient(transport=httpx.MockTransport(vendors.creem_handler)),
    )


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    generation_limiter.reset()
    yield
    generation_limiter.reset()


@pytest.fixture
def grant_credits(session: AsyncSession) -> Callable[..., Awaitable[None]]:
    """Add a ledger grant to a user, valid for 30 days unless told otherwise."""

    async def _grant(user: User, credits: int, expires_in: Optional[timedelta] = timedelta(days=30)) -> None:
        await increase_credits(
            session,
            user.uuid,
            CreditsTransType.order_pay,
            credits,
            expired_at=None if expires_in is None else utc_now() + expires_in,
        )

    return _grant


@pytest.fixture
def make_generation(session: AsyncSession) -> Callable[..., Awaitable[CharacterGeneration]]:
    """Insert a finished generation row for a user."""

    async def _make(user: User, **overrides) -> CharacterGeneration:
        fields = {
            "uuid": get_uuid(),
            "user_uuid": user.uuid,
            "original_prompt": "a knight with a silver sword",
            "enhanced_prompt": "fantasy art style, a knight with a silver sword",
            "style": "fantasy",
            "pose": "standing",
            "gender": "male",
            "age": "adult",
            "quality": "standard",
            "credits_used": 15,
            "generated_images": [{"url": "https://mock.cdn/knight.png", "width": 1024, "height": 1024}],
        }
        fields.update(overrides)
        return await CharacterGenerationRepository(session).create(CharacterGeneration(**fields))

    return _make


@pytest.fixture
def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.uuid, user.email)}"}


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession, nano_banana: NanoBananaService, kling: KlingClient, creem: CreemClient
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from character_figure.core.database import get_session
    from character_figure.server.main import app
    from character_figure.server.services import deps

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[deps.get_nano_banana] = lambda: nano_banana
    app.dependency_overrides[deps.get_kling] = lambda: kling
    app.dependency_overrides[deps.get_creem] = lambda: creem
    app.dependency_overrides[deps.get_openrouter] = lambda: OpenRouterClient("http://mock-openrouter", api_key=None)
    app.dependency_overrides[deps.get_siliconflow] = lambda: SiliconFlowClient("http://mock-siliconflow", api_key=None)
    app.dependency_overrides[deps.get_context7] = lambda: Context7Service()

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("character_figure.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()
