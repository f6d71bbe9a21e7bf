"""Creem payments client and webhook signature helpers."""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ProviderConfigurationError, ProviderError, ProviderTimeoutError, error_message_from_body

PROD_BASE_URL = "https://api.creem.io"
TEST_BASE_URL = "https://test-api.creem.io"
SIGNATURE_HEADER = "creem-signature"


def compute_signature(secret: str, payload: bytes) -> str:
    """Hex HMAC-SHA256 of the raw webhook body."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_signature(secret: str, payload: bytes, signature: str) -> bool:
    """Constant-time comparison of ``signature`` against the expected digest."""
    if not secret or not signature:
        return False
    return hmac.compare_digest(compute_signature(secret, payload), signature.strip().lower())


class CreemClient:
    """
    Thin async HTTP client for the Creem API.

    Responsibilities:
    - create_checkout
    - get_customer
    """

    def __init__(
        self,
        base_url: str = TEST_BASE_URL,
        *,
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ProviderConfigurationError("Creem", "CREEM_API_KEY")
        return {"Content-Type": "application/json", "x-api-key": self.api_key}

    async def create_checkout(
        self,
        *,
        product_id: str,
        request_id: str,
        success_url: str,
        customer_email: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        units: int = 1,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "product_id": product_id,
            "request_id": request_id,
            "units": units,
            "success_url": success_url,
            "metadata": metadata or {},
        }
        if customer_email:
            body["customer"] = {"email": customer_email}
        self._logger.debug("CreemClient.create_checkout: POST %s/v1/checkouts request_id=%s", self.base_url, request_id)
        return await self._request("POST", "/v1/checkouts", "create_checkout", json=body)

    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        return await self._request("GET", "/v1/customers", "get_customer", params={"customer_id": customer_id})

    async def _request(self, method: str, path: str, operation: str, **kwargs: Any) -> Dict[str, Any]:
        headers = self._headers()
        try:
            r = await self._client.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
            r.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(f"Creem {operation} timeout") from e
        except httpx.HTTPStatusError as e:
            try:
                details = e.response.json()
            except ValueError:
                details = e.response.text
            raise ProviderError(
                error_message_from_body(details, f"Creem {operation} failed: {e.response.status_code}"),
                status_code=e.response.status_code,
                details=details,
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(f"Creem {operation} failed: {e}", code="CONNECTION_ERROR") from e
        try:
            data = r.json()
        except ValueError as e:
            raise ProviderError(f"Creem {operation} returned invalid JSON", details=r.text) from e
        if not isinstance(data, dict):
            raise ProviderError(f"Creem {operation} returned an unexpected body", details=data)
        return data

    async def aclose(self) -> None:
        await self._client.aclose()
