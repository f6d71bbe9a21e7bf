"""Error types specific to the vendor API clients.

Purpose:
- Provide typed exceptions thrown by the provider clients.
- Expose HTTP-oriented context (status code, error body) for diagnosis.

Usage:
- Catch ``ProviderError`` for general failures and inspect ``status_code`` or
  ``details``.
- ``ProviderTimeoutError`` carries ``code == "TIMEOUT"``.
"""

from __future__ import annotations

from typing import Any, Optional


class ProviderError(Exception):
    """Base error for vendor API failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional structured payload from the vendor (e.g., JSON body).
        code: Short machine-readable error code.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.code = code or (f"HTTP_{status_code}" if status_code else "PROVIDER_ERROR")


class ProviderConfigurationError(ProviderError):
    """Raised when a client is used without the credentials it needs."""

    def __init__(self, provider: str, setting: str) -> None:
        super().__init__(f"{provider} is not configured: set {setting}", code="NOT_CONFIGURED")
        self.provider = provider


class ProviderTimeoutError(ProviderError):
    def __init__(self, message: str = "Request timeout") -> None:
        super().__init__(message, code="TIMEOUT")


class ProviderRequestError(ProviderError):
    """Invalid input detected before calling the vendor."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="INVALID_REQUEST")


def error_message_from_body(body: Any, default: str) -> str:
    """Pull a readable message out of a vendor error body."""
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
        if body.get("message"):
            return str(body["message"])
    return default
