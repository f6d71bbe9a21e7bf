"""Error types raised by services and mapped onto the API response envelope.

Purpose:
- Give services a small typed taxonomy instead of ad hoc strings.
- Carry the HTTP status and business ``code`` the envelope should use.

Usage:
- Raise a subclass of ``ApiError`` from a service or route; the registered
  exception handler renders ``{"code", "message", "error"}`` with ``status_code``.
"""

from __future__ import annotations

from typing import Any, Optional

ERROR_CODE = -1
NO_AUTH_CODE = -2


class ApiError(Exception):
    """Base error rendered as an error envelope.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code of the response.
        code: Business code placed in the envelope.
        details: Optional structured payload merged into the response body.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 400,
        code: int = ERROR_CODE,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details


class AuthenticationError(ApiError):
    """Missing, invalid or expired credentials (HTTP 401)."""

    def __init__(self, message: str = "no auth") -> None:
        super().__init__(message, status_code=401, code=NO_AUTH_CODE)


class PermissionDeniedError(ApiError):
    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message, status_code=403)


class NotFoundError(ApiError):
    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message, status_code=404)


class GoneError(ApiError):
    """The resource existed but was deleted (HTTP 410)."""

    def __init__(self, message: str = "Resource has been deleted") -> None:
        super().__init__(message, status_code=410)


class InsufficientCreditsError(ApiError):
    def __init__(self, message: str, *, required: int, available: int, status_code: int = 402) -> None:
        super().__init__(
            message,
            status_code=status_code,
            details={"required": required, "available": available},
        )
        self.required = required
        self.available = available


class RateLimitExceededError(ApiError):
    def __init__(self, message: str, *, retry_after: int) -> None:
        super().__init__(message, status_code=429, details={"retry_after": retry_after})
        self.retry_after = retry_after


class NotImplementedYetError(ApiError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=501)


class OrderError(ApiError):
    """Order cannot be fulfilled (unknown order or not in ``created`` state)."""


class GenerationError(ApiError):
    """The generation provider did not produce output."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code)
