"""Kling video generation client.

Kling authenticates with a short-lived HS256 JWT signed by the account's
secret key (``iss`` is the access key). Responses share the
``{"code", "message", "data"}`` shape; a non-zero ``code`` is an error.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx
from jose import jwt

from .errors import ProviderConfigurationError, ProviderError, ProviderTimeoutError, error_message_from_body

DEFAULT_BASE_URL = "https://api.klingai.com"
DEFAULT_MODEL = "kling-v1"
_ALGORITHM = "HS256"
TOKEN_TTL_SECONDS = 1800


def build_api_token(access_key: str, secret_key: str, *, now: Optional[float] = None) -> str:
    """Create the bearer JWT Kling expects for one API call window."""
    issued = int(now if now is not None else time.time())
    payload = {"iss": access_key, "exp": issued + TOKEN_TTL_SECONDS, "nbf": issued - 5}
    return jwt.encode(payload, secret_key, algorithm=_ALGORITHM, headers={"typ": "JWT"})


class KlingClient:
    """
    Thin async HTTP client for Kling image-to-video tasks.

    Responsibilities:
    - create_image_to_video (submit an interpolation task)
    - get_image_to_video (poll task status)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.access_key = access_key
        self.secret_key = secret_key
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        if not self.access_key or not self.secret_key:
            raise ProviderConfigurationError("Kling", "KLING_ACCESS_KEY and KLING_SECRET_KEY")
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {build_api_token(self.access_key, self.secret_key)}",
        }

    async def _request(self, method: str, path: str, *, json: Optional[dict] = None) -> Dict[str, Any]:
        headers = self._headers()
        try:
            self._logger.debug("KlingClient: %s %s%s", method, self.base_url, path)
            r = await self._client.request(method, f"{self.base_url}{path}", headers=headers, json=json)
            r.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("Kling request timeout") from e
        except httpx.HTTPStatusError as e:
            try:
                details = e.response.json()
            except ValueError:
                details = e.response.text
            raise ProviderError(
                error_message_from_body(details, f"Kling request failed: {e.response.status_code}"),
                status_code=e.response.status_code,
                details=details,
            ) from e

        payload = r.json()
        if payload.get("code", 0) != 0:
            raise ProviderError(
                payload.get("message") or "Kling request failed",
                status_code=r.status_code,
                details=payload,
                code=f"KLING_{payload.get('code')}",
            )
        return payload.get("data") or {}

    async def create_image_to_video(
        self,
        *,
        image: str,
        prompt: str,
        image_tail: Optional[str] = None,
        model_name: str = DEFAULT_MODEL,
        mode: str = "std",
        duration: int = 5,
        aspect_ratio: Optional[str] = None,
        cfg_scale: float = 0.5,
        camera_movement: Optional[str] = None,
        negative_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Submit an image-to-video task and return its ``data`` (``task_id``, ``task_status``)."""
        body: Dict[str, Any] = {
            "model_name": model_name,
            "image": image,
            "prompt": prompt,
            "mode": mode,
            "duration": str(duration),
            "cfg_scale": cfg_scale,
        }
        if image_tail:
            body["image_tail"] = image_tail
        if aspect_ratio:
            body["aspect_ratio"] = aspect_ratio
        if negative_prompt:
            body["negative_prompt"] = negative_prompt
        if camera_movement and camera_movement != "static":
            body["camera_control"] = {"type": camera_movement}
        data = await self._request("POST", "/v1/videos/image2video", json=body)
        self._logger.debug("KlingClient.create_image_to_video: task_id=%s", data.get("task_id"))
        return data

    async def get_image_to_video(self, task_id: str) -> Dict[str, Any]:
        """Fetch a task; ``task_status`` is submitted, processing, succeed or failed."""
        return await self._request("GET", f"/v1/videos/image2video/{task_id}")

    async def aclose(self) -> None:
        await self._client.aclose()
