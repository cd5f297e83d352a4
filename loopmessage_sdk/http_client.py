"""Async HTTP client shared by the LoopMessage services (uses httpx.AsyncClient)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Collection, Dict, Optional, Union

import httpx

from loopmessage_sdk._base import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, _build_headers
from loopmessage_sdk.config import LoopCredentials
from loopmessage_sdk.exceptions import raise_request_error
from loopmessage_sdk.retry import RetryPolicy, retry_with_exponential_backoff

logger = logging.getLogger(__name__)


class EndpointType(str, Enum):
    """Endpoint families; each one authenticates with a different secret header."""

    MESSAGE = "message"
    STATUS = "status"
    AUTH = "auth"
    WEBHOOK = "webhook"


def _secret_header(credentials: LoopCredentials, endpoint_type: EndpointType) -> tuple[Optional[str], Optional[str]]:
    if endpoint_type in (EndpointType.MESSAGE, EndpointType.STATUS):
        return "Loop-Secret-Key", credentials.secret_key
    if endpoint_type is EndpointType.AUTH:
        return "Auth-Secret-Key", credentials.auth_secret_key or ""
    return None, None


class LoopHttpClient:
    """Authenticated GET/POST against one LoopMessage endpoint family.

    Transport failures are classified into
    :class:`~loopmessage_sdk.exceptions.LoopMessageError` before the retry
    policy sees them, so non-retryable codes short-circuit immediately.

    Usage::

        async with LoopHttpClient(credentials, EndpointType.STATUS) as client:
            status = await client.get("/api/v1/message/status/abc/")
    """

    def __init__(
        self,
        credentials: LoopCredentials,
        endpoint_type: Union[EndpointType, str],
        *,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.endpoint_type = EndpointType(endpoint_type)
        self.base_url = (credentials.base_api_url or DEFAULT_BASE_URL).rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy()
        header, value = _secret_header(credentials, self.endpoint_type)
        self._headers = _build_headers(credentials.auth_key, header, value)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            timeout=timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "LoopHttpClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise_request_error(exc)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _log_retry(self, method: str, path: str):
        def on_retry(attempt: int, delay_ms: float, error: BaseException) -> None:
            logger.warning(
                f"{method} {path} failed ({error}); retry {attempt} in {delay_ms:.0f}ms"
            )

        return on_retry

    async def _request(
        self,
        method: str,
        path: str,
        *,
        should_retry: bool = True,
        max_retries: Optional[int] = None,
        base_delay_ms: Optional[float] = None,
        non_retryable_codes: Optional[Collection[Union[int, str]]] = None,
        **kwargs: Any,
    ) -> Any:
        if not should_retry:
            return await self._send(method, path, **kwargs)

        policy = self.retry_policy
        return await retry_with_exponential_backoff(
            lambda: self._send(method, path, **kwargs),
            max_retries=policy.max_retries if max_retries is None else max_retries,
            base_delay_ms=policy.base_delay_ms if base_delay_ms is None else base_delay_ms,
            non_retryable=policy.non_retryable if non_retryable_codes is None else non_retryable_codes,
            on_retry=self._log_retry(method, path),
        )

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    async def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        should_retry: bool = True,
        max_retries: Optional[int] = None,
        base_delay_ms: Optional[float] = None,
        non_retryable_codes: Optional[Collection[Union[int, str]]] = None,
    ) -> Any:
        """GET ``path`` and return the decoded body."""
        return await self._request(
            "GET",
            path,
            params=params,
            should_retry=should_retry,
            max_retries=max_retries,
            base_delay_ms=base_delay_ms,
            non_retryable_codes=non_retryable_codes,
        )

    async def post(
        self,
        path: str,
        json: Any = None,
        *,
        should_retry: bool = True,
        max_retries: Optional[int] = None,
        base_delay_ms: Optional[float] = None,
        non_retryable_codes: Optional[Collection[Union[int, str]]] = None,
    ) -> Any:
        """POST ``json`` to ``path`` and return the decoded body."""
        return await self._request(
            "POST",
            path,
            json=json,
            should_retry=should_retry,
            max_retries=max_retries,
            base_delay_ms=base_delay_ms,
            non_retryable_codes=non_retryable_codes,
        )
