"""
Tests for LoopHttpClient against a fake API on httpx.MockTransport.

Covers:
- Per-endpoint auth headers and base URL handling
- Body decoding (JSON, text, empty)
- Error classification at the client boundary
- Retry on 5xx/429/connection errors, fail-fast on 4xx, per-call overrides
"""

from __future__ import annotations

import httpx
import pytest

from loopmessage_sdk import LoopCredentials, LoopMessageError, RetryPolicy
from loopmessage_sdk._base import DEFAULT_BASE_URL
from loopmessage_sdk.http_client import EndpointType, LoopHttpClient

FAST = RetryPolicy(max_retries=2, base_delay_ms=1)


def _credentials(**overrides) -> LoopCredentials:
    data = {"auth_key": "ak", "secret_key": "sk", "auth_secret_key": "ask"}
    data.update(overrides)
    return LoopCredentials(**data)


def _client(api, endpoint=EndpointType.MESSAGE, **kwargs) -> LoopHttpClient:
    kwargs.setdefault("retry_policy", FAST)
    return LoopHttpClient(_credentials(), endpoint, transport=api.transport, **kwargs)


# ---------------------------------------------------------------------------
# Construction and headers
# ---------------------------------------------------------------------------

class TestClientInit:

    def test_default_base_url(self):
        client = LoopHttpClient(_credentials(), EndpointType.MESSAGE)
        assert client.base_url == DEFAULT_BASE_URL

    def test_custom_base_url_trailing_slash(self):
        client = LoopHttpClient(_credentials(base_api_url="https://example.test/"), "status")
        assert client.base_url == "https://example.test"
        assert client.endpoint_type is EndpointType.STATUS

    def test_default_retry_policy(self):
        assert LoopHttpClient(_credentials(), "message").retry_policy == RetryPolicy()

    def test_invalid_endpoint_type(self):
        with pytest.raises(ValueError):
            LoopHttpClient(_credentials(), "bogus")

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, api):
        async with _client(api) as client:
            pass
        assert client._client.is_closed


class TestHeaders:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("endpoint", [EndpointType.MESSAGE, EndpointType.STATUS])
    async def test_loop_secret_key(self, api, endpoint):
        api.reply(200, {})
        async with _client(api, endpoint) as client:
            await client.get("/x/")
        headers = api.requests[0].headers
        assert headers["Authorization"] == "ak"
        assert headers["Loop-Secret-Key"] == "sk"
        assert headers["Content-Type"] == "application/json"
        assert "Auth-Secret-Key" not in headers

    @pytest.mark.asyncio
    async def test_auth_secret_key(self, api):
        api.reply(200, {})
        async with _client(api, EndpointType.AUTH) as client:
            await client.post("/x/", {})
        headers = api.requests[0].headers
        assert headers["Auth-Secret-Key"] == "ask"
        assert "Loop-Secret-Key" not in headers

    @pytest.mark.asyncio
    async def test_webhook_has_no_secret_header(self, api):
        api.reply(200, {})
        async with _client(api, EndpointType.WEBHOOK) as client:
            await client.get("/x/")
        headers = api.requests[0].headers
        assert headers["Authorization"] == "ak"
        assert "Loop-Secret-Key" not in headers
        assert "Auth-Secret-Key" not in headers


# ---------------------------------------------------------------------------
# Requests and decoding
# ---------------------------------------------------------------------------

class TestRequests:

    @pytest.mark.asyncio
    async def test_post_json_body(self, api):
        api.reply(200, {"ok": True})
        async with _client(api) as client:
            result = await client.post("/api/v1/message/send/", {"text": "hi"})
        assert result == {"ok": True}
        assert api.requests[0].method == "POST"
        assert api.requests[0].url.path == "/api/v1/message/send/"
        assert api.last_json() == {"text": "hi"}

    @pytest.mark.asyncio
    async def test_get_params(self, api):
        api.reply(200, [])
        async with _client(api) as client:
            await client.get("/x/", params={"page": 2})
        assert api.requests[0].url.params["page"] == "2"

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self, api):
        api.reply(204)
        async with _client(api) as client:
            assert await client.get("/x/") is None

    @pytest.mark.asyncio
    async def test_text_body(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="OK"))
        async with LoopHttpClient(_credentials(), "message", transport=transport) as client:
            assert await client.get("/x/") == "OK"


# ---------------------------------------------------------------------------
# Errors and retries
# ---------------------------------------------------------------------------

class TestErrorsAndRetries:

    @pytest.mark.asyncio
    async def test_404_not_retried(self, api):
        api.reply(404, {"message": "unknown message"})
        async with _client(api) as client:
            with pytest.raises(LoopMessageError) as info:
                await client.get("/x/")
        assert info.value.code == 404
        assert info.value.cause == "unknown message"
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_401_not_retried(self, api):
        api.reply(401)
        async with _client(api) as client:
            with pytest.raises(LoopMessageError) as info:
                await client.post("/x/", {})
        assert info.value.code == 401
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_500_retried_until_exhausted(self, api):
        api.reply(500, {"message": "boom"})
        async with _client(api) as client:
            with pytest.raises(LoopMessageError) as info:
                await client.get("/x/")
        assert info.value.message == "boom"
        assert api.calls == 3

    @pytest.mark.asyncio
    async def test_429_then_success(self, api):
        api.reply(429).reply(200, {"done": 1})
        async with _client(api) as client:
            assert await client.get("/x/") == {"done": 1}
        assert api.calls == 2

    @pytest.mark.asyncio
    async def test_connection_error_retried_and_classified(self, api):
        api.fail(httpx.ConnectError("refused"))
        async with _client(api) as client:
            with pytest.raises(LoopMessageError) as info:
                await client.get("/x/")
        assert info.value.code == 500
        assert info.value.message == "Request failed"
        assert api.calls == 3

    @pytest.mark.asyncio
    async def test_should_retry_false(self, api):
        api.reply(503)
        async with _client(api) as client:
            with pytest.raises(LoopMessageError):
                await client.get("/x/", should_retry=False)
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_per_call_max_retries(self, api):
        api.reply(503)
        async with _client(api) as client:
            with pytest.raises(LoopMessageError):
                await client.post("/x/", {}, max_retries=0)
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_per_call_non_retryable_codes(self, api):
        api.reply(503)
        async with _client(api) as client:
            with pytest.raises(LoopMessageError):
                await client.get("/x/", non_retryable_codes={503})
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_retry_logs_warning(self, api, caplog):
        api.reply(500).reply(200, {})
        with caplog.at_level("WARNING", logger="loopmessage_sdk.http_client"):
            async with _client(api) as client:
                await client.get("/x/")
        assert any("retry 1" in r.getMessage() for r in caplog.records)
