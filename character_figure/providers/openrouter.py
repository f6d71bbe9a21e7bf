"""OpenRouter client.

OpenRouter exposes an OpenAI-compatible chat completions API over many
models. Image generation goes through the same endpoint; the image URL comes
back either as ``message.image_url`` or embedded in the message content.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from .errors import ProviderConfigurationError, ProviderError, ProviderTimeoutError, error_message_from_body

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
APP_TITLE = "Character Figure Generator"

_THINK_RE = re.compile(r"<think>(.*?)</think>", re.DOTALL)
_URL_RE = re.compile(r"https?://[^\s)\"']+")

OPENROUTER_IMAGE_MODELS: Dict[str, Dict[str, Any]] = {
    "openai/dall-e-3": {
        "name": "DALL-E 3 via OpenRouter",
        "max_prompt_length": 4000,
        "supported_sizes": ["1024x1024", "1024x1792", "1792x1024"],
        "default_size": "1024x1024",
    },
    "stable-diffusion-xl": {
        "name": "Stable Diffusion XL",
        "max_prompt_length": 1000,
        "supported_sizes": ["1024x1024", "1344x768", "768x1344"],
        "default_size": "1024x1024",
    },
}


def split_reasoning(content: str) -> tuple[str, Optional[str]]:
    """Separate ``<think>`` reasoning from the answer text."""
    match = _THINK_RE.search(content or "")
    if not match:
        return content, None
    reasoning = match.group(1).strip()
    return _THINK_RE.sub("", content).strip(), reasoning


class OpenRouterClient:
    """
    Thin async HTTP client for OpenRouter.

    Responsibilities:
    - chat_completion (raw call)
    - generate_text (text plus optional reasoning)
    - generate_image (image URLs from chat output)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        api_key: Optional[str] = None,
        referer: str = "http://localhost:3000",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.referer = referer
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ProviderConfigurationError("OpenRouter", "OPENROUTER_API_KEY")
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": self.referer,
            "X-Title": APP_TITLE,
        }

    async def chat_completion(self, model: str, messages: List[Dict[str, Any]], **extra: Any) -> Dict[str, Any]:
        headers = self._headers()
        body: Dict[str, Any] = {"model": model, "messages": messages, **extra}
        try:
            self._logger.debug("OpenRouterClient.chat_completion: POST %s/chat/completions model=%s", self.base_url, model)
            r = await self._client.post(f"{self.base_url}/chat/completions", headers=headers, json=body)
            r.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("OpenRouter request timeout") from e
        except httpx.HTTPStatusError as e:
            try:
                details = e.response.json()
            except ValueError:
                details = e.response.text
            raise ProviderError(
                error_message_from_body(details, f"OpenRouter request failed: {e.response.status_code}"),
                status_code=e.response.status_code,
                details=details,
            ) from e
        return r.json()

    async def generate_text(self, model: str, prompt: str) -> Dict[str, Optional[str]]:
        """Return ``{"text", "reasoning"}`` for a single-turn prompt."""
        data = await self.chat_completion(model, [{"role": "user", "content": prompt}])
        choices = data.get("choices") or []
        if not choices:
            raise ProviderError("OpenRouter returned no choices", details=data)
        message = choices[0].get("message") or {}
        text, reasoning = split_reasoning(message.get("content") or "")
        return {"text": text, "reasoning": message.get("reasoning") or reasoning}

    async def generate_image(
        self,
        model: str,
        prompt: str,
        *,
        size: Optional[str] = None,
        quality: str = "standard",
        style: str = "vivid",
        n: int = 1,
    ) -> List[Dict[str, Any]]:
        """Return ``[{"url", "revised_prompt"}]`` extracted from the chat output."""
        config = OPENROUTER_IMAGE_MODELS.get(model)
        if config is None:
            raise ProviderError(f"Unsupported model: {model}", code="UNSUPPORTED_MODEL")
        content = f"Generate an image: {prompt}" if model == "openai/dall-e-3" else prompt
        data = await self.chat_completion(
            model,
            [{"role": "user", "content": content}],
            n=n,
            size=size or config["default_size"],
            quality=quality,
            style=style,
        )
        images: List[Dict[str, Any]] = []
        for choice in data.get("choices") or []:
            message = choice.get("message") or {}
            if message.get("image_url"):
                images.append({"url": message["image_url"], "revised_prompt": message.get("content") or prompt})
                continue
            match = _URL_RE.search(message.get("content") or "")
            if match:
                images.append({"url": match.group(0), "revised_prompt": prompt})
        return images

    async def aclose(self) -> None:
        await self._client.aclose()
