"""Nano Banana image generation client.

``NanoBananaClient`` is the thin HTTP layer: it builds requests, retries
transient failures and raises typed ``ProviderError`` subclasses.

``NanoBananaService`` wraps the client the way routes and services consume
it: inputs are validated, every failure is folded into a result with
``success`` False, and usage statistics are accumulated.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from .errors import (
    ProviderConfigurationError,
    ProviderError,
    ProviderRequestError,
    ProviderTimeoutError,
    error_message_from_body,
)

DEFAULT_BASE_URL = "https://api.kie.ai/nano-banana"
CLIENT_NAME = "character-figure"
CLIENT_VERSION = "1.0.0"
MAX_PROMPT_LENGTH = 1000
MAX_IMAGES = 4
MAX_EDIT_IMAGES = 5


class NanoBananaClient:
    """
    Thin async HTTP client for the Nano Banana image API.

    Responsibilities:
    - generate (text to image)
    - edit (image plus prompt to image)

    Rate limiting (429), server errors (>= 500) and connection failures are
    retried with ``2 ** attempt`` second backoff, up to ``max_retries`` times.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        max_retries: int = 3,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.max_retries = max_retries
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-Client": CLIENT_NAME,
            "X-Client-Version": CLIENT_VERSION,
        }

    @staticmethod
    def _is_retryable_status(status_code: int) -> bool:
        return status_code == 429 or status_code >= 500

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ProviderConfigurationError("Nano Banana", "NANO_BANANA_API_KEY")

        url = f"{self.base_url}{endpoint}"
        attempt = 0
        while True:
            try:
                self._logger.debug("NanoBananaClient: POST %s attempt=%d", url, attempt)
                r = await self._client.post(url, headers=self._headers(), json=body)
            except httpx.TimeoutException as e:
                raise ProviderTimeoutError() from e
            except httpx.TransportError as e:
                if attempt < self.max_retries:
                    await self._backoff(attempt, f"connection error: {e}")
                    attempt += 1
                    continue
                raise ProviderError(f"Nano Banana connection failed: {e}", code="CONNECTION_ERROR") from e

            if r.is_success:
                return r.json()

            if self._is_retryable_status(r.status_code) and attempt < self.max_retries:
                await self._backoff(attempt, f"HTTP {r.status_code}")
                attempt += 1
                continue

            try:
                details = r.json()
            except ValueError:
                details = r.text
            raise ProviderError(
                error_message_from_body(details, "Request failed"),
                status_code=r.status_code,
                details=details,
            )

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = 2**attempt
        self._logger.warning("NanoBananaClient: %s, retrying in %ss", reason, delay)
        await self._sleep(delay)

    async def generate(
        self,
        prompt: str,
        *,
        num_images: int = 1,
        aspect_ratio: Optional[str] = None,
        style: Optional[str] = None,
        quality: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"prompt": prompt.strip(), "num_images": str(num_images)}
        if aspect_ratio:
            body["aspect_ratio"] = aspect_ratio
        if style:
            body["style"] = style
        if quality:
            body["quality"] = quality
        if seed is not None:
            body["seed"] = seed
        return await self._post("/generate", body)

    async def edit(
        self,
        prompt: str,
        image_urls: List[str],
        *,
        num_images: int = 1,
        edit_type: Optional[str] = None,
        mask_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"prompt": prompt.strip(), "image_urls": image_urls, "num_images": str(num_images)}
        if edit_type:
            body["edit_type"] = edit_type
        if mask_url:
            body["mask_url"] = mask_url
        return await self._post("/edit", body)

    async def aclose(self) -> None:
        await self._client.aclose()


@dataclass
class UsageStats:
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_images_generated: int = 0
    credits_used: int = 0
    credits_remaining: Optional[int] = None
    last_request_at: Optional[float] = None


@dataclass
class NanoBananaResult:
    """Outcome of a Nano Banana call. ``error`` is set when ``success`` is False."""

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    error_code: Optional[str] = None
    status_code: Optional[int] = None
    credits_used: Optional[int] = None
    remaining_credits: Optional[int] = None
    request_id: Optional[str] = None
    processing_time: Optional[float] = None

    @property
    def images(self) -> List[Dict[str, Any]]:
        return list(self.data.get("images") or [])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class NanoBananaService:
    """Result-returning façade over ``NanoBananaClient`` with usage statistics."""

    def __init__(self, client: NanoBananaClient) -> None:
        self._client = client
        self._stats = UsageStats()
        self._logger = logging.getLogger(__name__)

    async def generate_image(
        self,
        prompt: str,
        *,
        num_images: int = 1,
        aspect_ratio: Optional[str] = None,
        style: Optional[str] = None,
        quality: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> NanoBananaResult:
        try:
            if not prompt or not prompt.strip():
                raise ProviderRequestError("Prompt is required for image generation")
            if len(prompt) > MAX_PROMPT_LENGTH:
                raise ProviderRequestError(f"Prompt is too long (max {MAX_PROMPT_LENGTH} characters)")
            if not 1 <= num_images <= MAX_IMAGES:
                raise ProviderRequestError(f"Number of images must be between 1 and {MAX_IMAGES}")
            return await self._call(
                self._client.generate(
                    prompt,
                    num_images=num_images,
                    aspect_ratio=aspect_ratio,
                    style=style,
                    quality=quality,
                    seed=seed,
                )
            )
        except ProviderError as e:
            return self._failure(e)

    async def edit_image(
        self,
        prompt: str,
        image_urls: List[str],
        *,
        num_images: int = 1,
        edit_type: Optional[str] = None,
        mask_url: Optional[str] = None,
    ) -> NanoBananaResult:
        try:
            if not prompt or not prompt.strip():
                raise ProviderRequestError("Prompt is required for image editing")
            if not image_urls:
                raise ProviderRequestError("At least one image URL is required for editing")
            if len(image_urls) > MAX_EDIT_IMAGES:
                raise ProviderRequestError(f"Maximum {MAX_EDIT_IMAGES} images can be edited at once")
            if not all(_is_valid_url(url) for url in image_urls):
                raise ProviderRequestError("All image URLs must be valid")
            return await self._call(
                self._client.edit(prompt, image_urls, num_images=num_images, edit_type=edit_type, mask_url=mask_url)
            )
        except ProviderError as e:
            return self._failure(e)

    async def _call(self, request: Awaitable[Dict[str, Any]]) -> NanoBananaResult:
        self._stats.total_requests += 1
        self._stats.last_request_at = time.time()
        data = await request
        result = NanoBananaResult(
            success=True,
            data=data,
            credits_used=data.get("credits_used"),
            remaining_credits=data.get("remaining_credits"),
            request_id=data.get("request_id"),
            processing_time=data.get("processing_time"),
        )
        self._stats.successful_requests += 1
        self._stats.total_images_generated += len(result.images)
        if result.credits_used:
            self._stats.credits_used += int(result.credits_used)
        if result.remaining_credits is not None:
            self._stats.credits_remaining = result.remaining_credits
        return result

    def _failure(self, error: ProviderError) -> NanoBananaResult:
        if error.code != "INVALID_REQUEST":
            self._stats.failed_requests += 1
        self._logger.error("Nano Banana request failed: %s (%s)", error.message, error.code)
        return NanoBananaResult(
            success=False,
            data={"error": error.message},
            error=error.message,
            error_code=error.code,
            status_code=error.status_code,
        )

    def get_usage_stats(self) -> Dict[str, Any]:
        return asdict(self._stats)
