"""
Tests for LoopMessageError and transport error classification.

Covers:
- LoopMessageError fields, repr and to_dict()
- Construction helpers and their codes
- raise_request_error(): HTTP status mapping, API message/code passthrough,
  connection failures, no double wrapping
"""

from __future__ import annotations

import httpx
import pytest

from loopmessage_sdk.exceptions import LoopMessageError, raise_request_error


def _status_error(status_code: int, body=None) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://server.loopmessage.com/api/v1/message/status/abc/")
    response = httpx.Response(status_code, json=body, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


def _classify(exc: BaseException) -> LoopMessageError:
    with pytest.raises(LoopMessageError) as info:
        raise_request_error(exc)
    return info.value


# ---------------------------------------------------------------------------
# LoopMessageError
# ---------------------------------------------------------------------------

class TestLoopMessageError:

    def test_fields(self):
        err = LoopMessageError("Boom", 418, "teapot")
        assert err.message == "Boom"
        assert err.code == 418
        assert err.cause == "teapot"
        assert str(err) == "Boom"

    def test_cause_optional(self):
        assert LoopMessageError("Boom", 500).cause is None

    def test_to_dict(self):
        assert LoopMessageError("Boom", 500, "x").to_dict() == {
            "message": "Boom",
            "code": 500,
            "cause": "x",
        }

    def test_repr(self):
        assert "code=500" in repr(LoopMessageError("Boom", 500))

    def test_is_exception(self):
        assert issubclass(LoopMessageError, Exception)


class TestConstructionHelpers:

    def test_auth_error(self):
        err = LoopMessageError.auth_error()
        assert err.code == 401
        assert err.cause == "Invalid API credentials"

    def test_missing_param(self):
        err = LoopMessageError.missing_param_error("text")
        assert err.code == 400
        assert err.message == "Missing required parameter: text"

    def test_invalid_param(self):
        err = LoopMessageError.invalid_param_error("effect", "nope")
        assert err.code == 400
        assert err.message == "Invalid parameter: effect"
        assert err.cause == "nope"

    def test_not_found(self):
        assert LoopMessageError.not_found_error("Message").code == 404

    def test_rate_limit_with_retry_after(self):
        err = LoopMessageError.rate_limit_error(30)
        assert err.code == 429
        assert "30 seconds" in err.message

    def test_server_error(self):
        assert LoopMessageError.server_error().code == 500

    def test_network_error_code_zero(self):
        assert LoopMessageError.network_error().code == 0

    def test_timeout(self):
        err = LoopMessageError.timeout_error("too slow")
        assert err.code == 408
        assert err.cause == "too slow"


# ---------------------------------------------------------------------------
# raise_request_error()
# ---------------------------------------------------------------------------

class TestRaiseRequestError:

    def test_404_uses_api_message(self):
        err = _classify(_status_error(404, {"message": "No such message"}))
        assert err.code == 404
        assert err.message == "Resource not found"
        assert err.cause == "No such message"

    def test_404_default_cause(self):
        err = _classify(_status_error(404))
        assert err.cause == "The requested resource does not exist"

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses(self, status):
        err = _classify(_status_error(status, {"message": "bad key"}))
        assert err.code == status
        assert err.message == "Authentication failed"
        assert err.cause == "Invalid API credentials"

    def test_400_uses_api_message(self):
        err = _classify(_status_error(400, {"message": "text too long", "code": 140}))
        assert err.code == 400
        assert err.message == "Invalid request"
        assert err.cause == "text too long"

    def test_400_default_cause(self):
        assert _classify(_status_error(400)).cause == "The request parameters are invalid"

    def test_other_status_passes_api_code(self):
        err = _classify(_status_error(500, {"message": "Sender suspended", "code": 210}))
        assert err.message == "Sender suspended"
        assert err.code == 210

    def test_other_status_falls_back_to_http_status(self):
        err = _classify(_status_error(503))
        assert err.message == "API request failed"
        assert err.code == 503
        assert "503" in err.cause

    def test_429_keeps_status(self):
        assert _classify(_status_error(429)).code == 429

    def test_non_json_error_body(self):
        request = httpx.Request("GET", "https://server.loopmessage.com/")
        response = httpx.Response(502, text="<html>bad gateway</html>", request=request)
        err = _classify(httpx.HTTPStatusError("HTTP 502", request=request, response=response))
        assert err.code == 502

    def test_connection_failure(self):
        err = _classify(httpx.ConnectError("connection refused"))
        assert err.code == 500
        assert err.message == "Request failed"
        assert err.cause == "connection refused"

    def test_arbitrary_exception(self):
        err = _classify(RuntimeError("weird"))
        assert err.code == 500

    def test_already_classified_is_not_wrapped(self):
        original = LoopMessageError("Custom", 418)
        assert _classify(original) is original

    def test_chains_original(self):
        exc = httpx.ConnectError("down")
        assert _classify(exc).__cause__ is exc
