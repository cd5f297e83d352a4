"""
LoopSdk - one object for sending, status checks and webhooks.

Usage::

    config = LoopSdkConfig(auth_key="...", secret_key="...", sender_name="bot@icloud.com")
    async with LoopSdk(config) as sdk:
        sent = await sdk.send_message(recipient="+13231112233", text="hi")
        status = await sdk.wait_for_message_status(sent.message_id, "sent")
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

import httpx

from loopmessage_sdk._base import STATUS_MAX_ATTEMPTS, STATUS_POLL_INTERVAL_MS, STATUS_TIMEOUT_MS
from loopmessage_sdk.config import LoopSdkConfig
from loopmessage_sdk.events import EventService
from loopmessage_sdk.exceptions import LoopMessageError
from loopmessage_sdk.log import set_log_level
from loopmessage_sdk.models import AuthResponse, MessageStatusResponse, SendMessageResponse, WebhookPayload
from loopmessage_sdk.services.message import LoopMessageService, ParamsInput
from loopmessage_sdk.services.status import MessageStatusChecker, StatusTarget
from loopmessage_sdk.services.webhooks import WebhookHandler

logger = logging.getLogger(__name__)


class LoopSdk(EventService):
    """Facade over the message, status and webhook services.

    Every event published by a sub-service is republished here unchanged,
    so subscribing on the SDK is enough to observe everything.
    """

    def __init__(
        self,
        config: LoopSdkConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.config = config
        if config.log_level:
            set_log_level(config.log_level)

        self._message_service = LoopMessageService(config, transport=transport)
        self._status_checker = MessageStatusChecker(
            config.credentials(),
            retry_policy=config.retry_policy,
            timeout=config.request_timeout,
            transport=transport,
        )
        self._webhook_handler: Optional[WebhookHandler] = None
        if config.webhook_secret_key:
            self._webhook_handler = WebhookHandler(config.webhook_secret_key)

        for service in (self._message_service, self._status_checker, self._webhook_handler):
            if service is not None:
                service.subscribe_all(self.publish)

        logger.debug(
            f"LoopSdk ready (webhooks={'on' if self._webhook_handler else 'off'}, "
            f"retry={config.retry_policy.to_dict()})"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "LoopSdk":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        try:
            await self._message_service.aclose()
        finally:
            await self._status_checker.aclose()

    # ------------------------------------------------------------------
    # Sub-services
    # ------------------------------------------------------------------

    @property
    def message_service(self) -> LoopMessageService:
        return self._message_service

    @property
    def status_checker(self) -> MessageStatusChecker:
        return self._status_checker

    @property
    def webhook_handler(self) -> Optional[WebhookHandler]:
        return self._webhook_handler

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def send_message(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        return await self._message_service.send_loop_message(params, **kwargs)

    async def send_audio_message(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        return await self._message_service.send_audio_message(params, **kwargs)

    async def send_message_with_effect(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        return await self._message_service.send_message_with_effect(params, **kwargs)

    async def send_reaction(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        return await self._message_service.send_reaction(params, **kwargs)

    async def send_reply(self, params: ParamsInput = None, **kwargs: Any) -> SendMessageResponse:
        return await self._message_service.send_reply(params, **kwargs)

    async def initiate_auth(self, passthrough: Optional[str] = None) -> AuthResponse:
        return await self._message_service.send_loop_auth_request(passthrough)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def check_message_status(self, message_id: str) -> MessageStatusResponse:
        return await self._status_checker.check_status(message_id)

    async def wait_for_message_status(
        self,
        message_id: str,
        target_status: StatusTarget,
        *,
        max_attempts: int = STATUS_MAX_ATTEMPTS,
        delay_ms: float = STATUS_POLL_INTERVAL_MS,
        timeout_ms: float = STATUS_TIMEOUT_MS,
    ) -> MessageStatusResponse:
        return await self._status_checker.wait_for_status(
            message_id,
            target_status,
            max_attempts=max_attempts,
            delay_ms=delay_ms,
            timeout_ms=timeout_ms,
        )

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def parse_webhook(self, body: Union[str, bytes], signature: Optional[str]) -> WebhookPayload:
        """Verify and parse a webhook; needs ``webhook_secret_key`` in the config."""
        if self._webhook_handler is None:
            raise LoopMessageError.missing_param_error("webhook_secret_key")
        return self._webhook_handler.parse_webhook(body, signature)
