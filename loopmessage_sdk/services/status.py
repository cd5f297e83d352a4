"""Message status checks and polling until a target status is reached."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterable, Optional, Tuple, Union

import httpx

from loopmessage_sdk._base import (
    DEFAULT_TIMEOUT,
    STATUS_ENDPOINT,
    STATUS_MAX_ATTEMPTS,
    STATUS_POLL_INTERVAL_MS,
    STATUS_TIMEOUT_MS,
)
from loopmessage_sdk.config import LoopCredentials
from loopmessage_sdk.events import ERROR_EVENT, EventService, StatusEvent
from loopmessage_sdk.exceptions import LoopMessageError
from loopmessage_sdk.http_client import EndpointType, LoopHttpClient
from loopmessage_sdk.models import MessageStatus, MessageStatusResponse, parse_api_response
from loopmessage_sdk.retry import RetryPolicy

logger = logging.getLogger(__name__)

StatusTarget = Union[MessageStatus, str, Iterable[Union[MessageStatus, str]]]


def _normalize_targets(target_status: StatusTarget) -> Tuple[MessageStatus, ...]:
    raw = [target_status] if isinstance(target_status, str) else list(target_status)
    if not raw:
        raise LoopMessageError.missing_param_error("target_status")
    try:
        return tuple(MessageStatus(s) for s in raw)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in MessageStatus)
        raise LoopMessageError.invalid_param_error(
            "target_status", f"Status must be one of: {allowed}"
        ) from exc


class MessageStatusChecker(EventService):
    """Reads message status from ``GET /api/v1/message/status/{id}/``."""

    def __init__(
        self,
        credentials: LoopCredentials,
        *,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self._status_client = LoopHttpClient(
            credentials,
            EndpointType.STATUS,
            retry_policy=retry_policy,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._status_client.aclose()

    async def check_status(self, message_id: str) -> MessageStatusResponse:
        """Fetch the current status of ``message_id`` once (retried per the client policy)."""
        if not message_id:
            error = LoopMessageError.missing_param_error("message_id")
            self.publish(StatusEvent.STATUS_ERROR, {"message_id": message_id, "error": error})
            raise error

        self.publish(StatusEvent.STATUS_CHECK, {"message_id": message_id})
        try:
            data = await self._status_client.get(f"{STATUS_ENDPOINT}{message_id}/")
            status = parse_api_response(MessageStatusResponse, data)
        except Exception as exc:
            self.publish(StatusEvent.STATUS_ERROR, {"message_id": message_id, "error": exc})
            raise

        logger.debug(f"Message {message_id} status: {status.status.value}")
        self.publish(StatusEvent.STATUS_CHECK, {"message_id": message_id, "status": status})
        return status

    async def wait_for_status(
        self,
        message_id: str,
        target_status: StatusTarget,
        *,
        max_attempts: int = STATUS_MAX_ATTEMPTS,
        delay_ms: float = STATUS_POLL_INTERVAL_MS,
        timeout_ms: float = STATUS_TIMEOUT_MS,
    ) -> MessageStatusResponse:
        """Poll until the message reaches one of ``target_status``.

        Returns as soon as a targeted status is seen, or immediately on
        ``failed`` since a failed message never moves on. Raises a 408
        :class:`LoopMessageError` once ``timeout_ms`` (when > 0) has elapsed.
        When ``max_attempts`` run out first, one last check is made and its
        result returned whatever the status.
        """
        targets = _normalize_targets(target_status)

        attempts = 0
        start = time.monotonic()
        last_status: Optional[MessageStatus] = None

        while attempts < max_attempts:
            elapsed_ms = (time.monotonic() - start) * 1000
            if timeout_ms > 0 and elapsed_ms > timeout_ms:
                target_list = ", ".join(t.value for t in targets)
                error = LoopMessageError.timeout_error(
                    f"Message did not reach target status(es) [{target_list}] within {timeout_ms}ms"
                )
                self.publish(
                    StatusEvent.STATUS_TIMEOUT,
                    {
                        "message_id": message_id,
                        "target_statuses": list(targets),
                        "elapsed_ms": elapsed_ms,
                        "attempts": attempts,
                    },
                )
                self.publish(ERROR_EVENT, error)
                raise error

            status = await self.check_status(message_id)

            if last_status is not None and last_status != status.status:
                self.publish(
                    StatusEvent.STATUS_CHANGE,
                    {
                        "message_id": message_id,
                        "old_status": last_status,
                        "new_status": status.status,
                        "status": status,
                    },
                )
            last_status = status.status

            if status.status in targets:
                return status
            if status.status is MessageStatus.FAILED:
                return status

            attempts += 1
            if attempts < max_attempts:
                await asyncio.sleep(delay_ms / 1000)

        logger.warning(
            f"Message {message_id} still '{last_status.value if last_status else None}' "
            f"after {max_attempts} attempts; returning latest status"
        )
        return await self.check_status(message_id)
