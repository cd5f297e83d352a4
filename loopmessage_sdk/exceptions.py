"""SDK exception type and transport error classification.

Every failure the SDK surfaces is a :class:`LoopMessageError` carrying a
numeric ``code`` (an HTTP status or a provider domain code), a short
``message`` and an optional human-readable ``cause``.
"""

from __future__ import annotations

from typing import Any, Dict, NoReturn, Optional

import httpx

from loopmessage_sdk._base import _extract_error


class LoopMessageError(Exception):
    """Raised for validation, API, transport and timeout failures."""

    def __init__(self, message: str, code: int, cause: Optional[str] = None):
        self.message = message
        self.code = code
        self.cause = cause
        super().__init__(message)

    def __repr__(self) -> str:
        return f"LoopMessageError(message={self.message!r}, code={self.code}, cause={self.cause!r})"

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, "cause": self.cause}

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def auth_error(cls, details: Optional[str] = None) -> "LoopMessageError":
        return cls("Authentication failed", 401, details or "Invalid API credentials")

    @classmethod
    def missing_param_error(cls, param: str) -> "LoopMessageError":
        return cls(
            f"Missing required parameter: {param}",
            400,
            "Required parameter missing in request",
        )

    @classmethod
    def invalid_param_error(cls, param: str, details: Optional[str] = None) -> "LoopMessageError":
        return cls(f"Invalid parameter: {param}", 400, details or "Parameter validation failed")

    @classmethod
    def not_found_error(cls, resource: str) -> "LoopMessageError":
        return cls(f"{resource} not found", 404, "The requested resource does not exist")

    @classmethod
    def rate_limit_error(cls, retry_after: Optional[int] = None) -> "LoopMessageError":
        message = (
            f"Rate limit exceeded. Retry after {retry_after} seconds."
            if retry_after
            else "Rate limit exceeded"
        )
        return cls(message, 429, "Too many requests")

    @classmethod
    def server_error(cls, details: Optional[str] = None) -> "LoopMessageError":
        return cls("Server error", 500, details or "An unexpected error occurred on the server")

    @classmethod
    def network_error(cls, details: Optional[str] = None) -> "LoopMessageError":
        return cls("Network error", 0, details or "Failed to connect to the server")

    @classmethod
    def timeout_error(cls, details: Optional[str] = None) -> "LoopMessageError":
        return cls("Request timeout", 408, details or "The request took too long to complete")


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def raise_request_error(exc: BaseException) -> NoReturn:
    """Classify a transport failure and raise it as a :class:`LoopMessageError`.

    Errors that are already classified are re-raised untouched so nothing is
    wrapped twice.
    """
    if isinstance(exc, LoopMessageError):
        raise exc

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        api_message, api_code = _extract_error(_response_body(exc.response))

        if status == 404:
            raise LoopMessageError(
                "Resource not found",
                404,
                api_message or "The requested resource does not exist",
            ) from exc

        if status in (401, 403):
            raise LoopMessageError("Authentication failed", status, "Invalid API credentials") from exc

        if status == 400:
            raise LoopMessageError(
                "Invalid request",
                400,
                api_message or "The request parameters are invalid",
            ) from exc

        raise LoopMessageError(
            api_message or "API request failed",
            api_code if api_code is not None else status,
            str(exc),
        ) from exc

    # No response at all: connection refused, DNS failure, read timeout...
    raise LoopMessageError("Request failed", 500, str(exc)) from exc
