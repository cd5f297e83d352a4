"""Shared constants and helpers used across the SDK services."""

from __future__ import annotations

from typing import Any, Dict, Optional

DEFAULT_BASE_URL = "https://server.loopmessage.com"
DEFAULT_TIMEOUT = 30.0

SEND_ENDPOINT = "/api/v1/message/send/"
STATUS_ENDPOINT = "/api/v1/message/status/"
AUTH_ENDPOINT = "/api/v1/auth/initiate/"

# -----------------------------------------------------------------------
# Message limits
# -----------------------------------------------------------------------

MAX_TEXT_LENGTH = 10000
MAX_ATTACHMENTS = 3
MAX_PASSTHROUGH_LENGTH = 1000
MIN_TIMEOUT_SECONDS = 5
LOG_TEXT_PREVIEW = 100

# -----------------------------------------------------------------------
# Status polling defaults
# -----------------------------------------------------------------------

STATUS_POLL_INTERVAL_MS = 2000
STATUS_MAX_ATTEMPTS = 10
STATUS_TIMEOUT_MS = 30000


def _build_headers(
    auth_key: str,
    secret_header: Optional[str] = None,
    secret_value: Optional[str] = None,
) -> Dict[str, str]:
    headers: Dict[str, str] = {
        "Content-Type": "application/json",
        "Authorization": auth_key,
    }
    if secret_header:
        headers[secret_header] = secret_value or ""
    return headers


def _extract_error(body: Any) -> tuple[Optional[str], Optional[int]]:
    """Pull ``(message, code)`` from a LoopMessage error response body."""
    if not isinstance(body, dict):
        return None, None
    message = body.get("message")
    code = body.get("code")
    if not isinstance(message, str) or not message:
        message = None
    if isinstance(code, bool) or not isinstance(code, int):
        code = None
    return message, code


def _truncate(text: Optional[str], limit: int = LOG_TEXT_PREVIEW) -> Optional[str]:
    if text is None or len(text) <= limit:
        return text
    return f"{text[:limit]}..."
