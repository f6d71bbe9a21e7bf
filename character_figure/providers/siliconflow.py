"""SiliconFlow client.

SiliconFlow serves OpenAI-compatible chat completions and an image
generation endpoint for FLUX and Stable Diffusion models.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .errors import ProviderConfigurationError, ProviderError, ProviderTimeoutError, error_message_from_body

DEFAULT_BASE_URL = "https://api.siliconflow.cn/v1"

_COMMON_SIZES = ["1024x1024", "512x1024", "768x512", "768x1024", "1024x576", "576x1024"]

SILICONFLOW_IMAGE_MODELS: Dict[str, Dict[str, Any]] = {
    "black-forest-labs/FLUX.1-schnell": {"name": "FLUX.1 Schnell", "max_prompt_length": 1000},
    "stabilityai/stable-diffusion-3-5-large": {"name": "Stable Diffusion 3.5 Large", "max_prompt_length": 1000},
    "stabilityai/stable-diffusion-3-5-large-turbo": {"name": "SD 3.5 Large Turbo", "max_prompt_length": 1000},
    "stabilityai/stable-diffusion-3-medium": {"name": "Stable Diffusion 3 Medium", "max_prompt_length": 1000},
}
DEFAULT_IMAGE_SIZE = "1024x1024"


class SiliconFlowClient:
    """
    Thin async HTTP client for SiliconFlow.

    Responsibilities:
    - generate_text (chat completions, reasoning_content aware)
    - generate_images (images/generations)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ProviderConfigurationError("SiliconFlow", "SILICONFLOW_API_KEY")
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = self._headers()
        try:
            self._logger.debug("SiliconFlowClient: POST %s%s model=%s", self.base_url, path, body.get("model"))
            r = await self._client.post(f"{self.base_url}{path}", headers=headers, json=body)
            r.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("SiliconFlow request timeout") from e
        except httpx.HTTPStatusError as e:
            try:
                details = e.response.json()
            except ValueError:
                details = e.response.text
            raise ProviderError(
                error_message_from_body(details, "Image generation failed"),
                status_code=e.response.status_code,
                details=details,
            ) from e
        return r.json()

    async def generate_text(self, model: str, prompt: str) -> Dict[str, Optional[str]]:
        data = await self._post("/chat/completions", {"model": model, "messages": [{"role": "user", "content": prompt}]})
        choices = data.get("choices") or []
        if not choices:
            raise ProviderError("SiliconFlow returned no choices", details=data)
        message = choices[0].get("message") or {}
        return {"text": message.get("content") or "", "reasoning": message.get("reasoning_content")}

    async def generate_images(
        self,
        model: str,
        prompt: str,
        *,
        size: Optional[str] = None,
        n: int = 1,
        image_format: str = "jpeg",
    ) -> List[Dict[str, Any]]:
        """Return ``[{"url", "revised_prompt"}]``; base64-only items are skipped."""
        if model not in SILICONFLOW_IMAGE_MODELS:
            raise ProviderError(f"Unsupported model: {model}", code="UNSUPPORTED_MODEL")
        if size and size not in _COMMON_SIZES:
            raise ProviderError(f"Unsupported size: {size}", code="UNSUPPORTED_SIZE")
        data = await self._post(
            "/images/generations",
            {
                "model": model,
                "prompt": prompt,
                "n": n,
                "size": size or DEFAULT_IMAGE_SIZE,
                "response_format": "url",
                "image_format": image_format,
            },
        )
        images: List[Dict[str, Any]] = []
        for item in data.get("data") or data.get("images") or []:
            if item.get("url"):
                images.append({"url": item["url"], "revised_prompt": item.get("revised_prompt") or prompt})
            else:
                self._logger.warning("SiliconFlowClient.generate_images: skipping item without url")
        return images

    async def aclose(self) -> None:
        await self._client.aclose()
