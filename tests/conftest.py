"""Shared fixtures: an SDK config and a fake LoopMessage API on httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, List, Optional, Union

import httpx
import pytest

from loopmessage_sdk import LoopSdkConfig, RetryPolicy

WEBHOOK_SECRET = "whsec_test"


class FakeLoopApi:
    """Replays queued responses in order; the last one repeats once the queue is drained.

    A queued exception is raised from the transport instead of returning a
    response, which is how httpx surfaces connection failures.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responses: List[Union[httpx.Response, Exception]] = []
        self.transport = httpx.MockTransport(self._handle)

    def reply(self, status_code: int = 200, body: Any = None) -> "FakeLoopApi":
        self._responses.append(httpx.Response(status_code, json=body))
        return self

    def fail(self, exc: Exception) -> "FakeLoopApi":
        self._responses.append(exc)
        return self

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> Optional[Any]:
        content = self.requests[-1].content
        return json.loads(content) if content else None

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(500, json={"message": "no response queued"})
        item = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def api() -> FakeLoopApi:
    return FakeLoopApi()


@pytest.fixture
def config() -> LoopSdkConfig:
    return LoopSdkConfig(
        auth_key="test-auth-key",
        secret_key="test-secret-key",
        auth_secret_key="test-auth-secret",
        sender_name="s@x.co",
        webhook_secret_key=WEBHOOK_SECRET,
        retry_policy=RetryPolicy(max_retries=2, base_delay_ms=1),
    )
