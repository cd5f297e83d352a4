"""Message sending and iMessage auth requests."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from loopmessage_sdk._base import AUTH_ENDPOINT, SEND_ENDPOINT, _truncate
from loopmessage_sdk.config import LoopSdkConfig
from loopmessage_sdk.events import EventService, MessageEvent
from loopmessage_sdk.exceptions import LoopMessageError
from loopmessage_sdk.http_client import EndpointType, LoopHttpClient
from loopmessage_sdk.models import AuthResponse, SendMessageParams, SendMessageResponse, parse_api_response
from loopmessage_sdk.validators import validate_message_params, validate_passthrough

logger = logging.getLogger(__name__)

ParamsInput = Union[SendMessageParams, Mapping[str, Any], None]


def _from_validation_error(exc: ValidationError) -> LoopMessageError:
    first = exc.errors()[0]
    param = ".".join(str(part) for part in first.get("loc", ())) or "params"
    return LoopMessageError.invalid_param_error(param, first.get("msg"))


class LoopMessageService(EventService):
    """Sends messages through ``POST /api/v1/message/send/``.

    ``sender_name`` always comes from the config; every request is validated
    before it is sent.
    """

    def __init__(
        self,
        config: LoopSdkConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        if not config.sender_name:
            raise LoopMessageError.missing_param_error("sender_name")

        self.config = config
        self._message_client = LoopHttpClient(
            config.credentials(),
            EndpointType.MESSAGE,
            retry_policy=config.retry_policy,
            timeout=config.request_timeout,
            transport=transport,
        )
        self._auth_client = LoopHttpClient(
            config.credentials(base_api_url=config.auth_api_host),
            EndpointType.AUTH,
            retry_policy=config.retry_policy,
            timeout=config.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        try:
            await self._message_client.aclose()
        finally:
            await self._auth_client.aclose()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _prepare(
        self,
        params: ParamsInput,
        overrides: Mapping[str, Any],
        required: Iterable[str] = (),
    ) -> SendMessageParams:
        if isinstance(params, SendMessageParams):
            data: Dict[str, Any] = params.model_dump(exclude_none=True)
        else:
            data = dict(params or {})
        data.update(overrides)
        data["sender_name"] = self.config.sender_name

        try:
            for name in required:
                if not data.get(name):
                    raise LoopMessageError.missing_param_error(name)
            try:
                full = SendMessageParams.model_validate(data)
            except ValidationError as exc:
                raise _from_validation_error(exc) from exc
            validate_message_params(full)
        except LoopMessageError as error:
            logger.debug(f"Message parameters rejected: {error.message} ({error.cause})")
            self.publish(
                MessageEvent.PARAM_VALIDATION_FAIL,
                {"error": error, "params": {**data, "sender_name": "[REDACTED]"}},
            )
            raise
        return full

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_loop_message(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        """Validate and send a message. Keyword arguments override ``params``."""
        return await self._send(self._prepare(params, kwargs))

    async def _send(self, full: SendMessageParams) -> SendMessageResponse:
        body = full.to_request()
        log_safe = {k: v for k, v in body.items() if k != "sender_name"}
        log_safe["text"] = _truncate(full.text)

        self.publish(MessageEvent.SEND_START, {"params": log_safe})
        try:
            data = await self._message_client.post(SEND_ENDPOINT, body)
            response = parse_api_response(SendMessageResponse, data)
        except Exception as exc:
            logger.error(f"Message send failed: {exc}")
            self.publish(MessageEvent.SEND_ERROR, {"error": exc, "params": log_safe})
            raise

        logger.info(f"Message {response.message_id} accepted (success={response.success})")
        self.publish(MessageEvent.SEND_SUCCESS, {"response": response})
        return response

    async def send_audio_message(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        """Send a voice message; ``media_url`` is required."""
        full = self._prepare(params, {**kwargs, "audio_message": True}, required=("media_url",))
        return await self._send(full)

    async def send_reaction(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        """React to ``message_id`` with ``reaction``."""
        full = self._prepare(params, kwargs, required=("message_id", "reaction"))
        return await self._send(full)

    async def send_message_with_effect(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        full = self._prepare(params, kwargs, required=("effect",))
        return await self._send(full)

    async def send_reply(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        full = self._prepare(params, kwargs, required=("reply_to_id",))
        return await self._send(full)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def send_loop_auth_request(self, passthrough: Optional[str] = None) -> AuthResponse:
        """Start an iMessage auth request; the response carries the ``imessage_link``."""
        try:
            validate_passthrough(passthrough)
            self.publish(MessageEvent.AUTH_START, {"passthrough": passthrough})
            data = await self._auth_client.post(AUTH_ENDPOINT, {"passthrough": passthrough or ""})
            response = parse_api_response(AuthResponse, data)
        except Exception as exc:
            logger.error(f"Auth request failed: {exc}")
            self.publish(MessageEvent.AUTH_ERROR, {"error": exc, "passthrough": passthrough})
            raise

        self.publish(MessageEvent.AUTH_SUCCESS, {"response": response})
        return response
