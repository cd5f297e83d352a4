"""Observer registration shared by the SDK services."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Union

ERROR_EVENT = "error"


class MessageEvent(str, Enum):
    SEND_START = "send_start"
    SEND_SUCCESS = "send_success"
    SEND_ERROR = "send_error"
    PARAM_VALIDATION_FAIL = "param_validation_fail"
    AUTH_START = "auth_start"
    AUTH_SUCCESS = "auth_success"
    AUTH_ERROR = "auth_error"


class StatusEvent(str, Enum):
    STATUS_CHECK = "status_check"
    STATUS_CHANGE = "status_change"
    STATUS_TIMEOUT = "status_timeout"
    STATUS_ERROR = "status_error"


class WebhookEvent(str, Enum):
    WEBHOOK_RECEIVED = "webhook_received"
    WEBHOOK_VERIFIED = "webhook_verified"
    WEBHOOK_INVALID = "webhook_invalid"
    WEBHOOK_PARSE_ERROR = "webhook_parse_error"
    SIGNATURE_ERROR = "signature_error"
    # Fired with the parsed payload for every verified webhook, next to the
    # event named after the payload's ``type``.
    WEBHOOK = "webhook"


EventName = Union[str, Enum]
Handler = Callable[[Any], None]
AnyHandler = Callable[[str, Any], None]


def _event_key(event: EventName) -> str:
    return event.value if isinstance(event, Enum) else str(event)


class EventService:
    """Per-instance subscriber lists keyed by event name.

    Handlers run synchronously in registration order; an exception raised by
    a handler propagates to the code that published the event.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._any_handlers: List[AnyHandler] = []

    def subscribe(self, event: EventName, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for ``event``. Returns a callable that unsubscribes it."""
        key = _event_key(event)
        self._handlers.setdefault(key, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(key, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def subscribe_all(self, handler: AnyHandler) -> Callable[[], None]:
        """Register ``handler(event_name, payload)`` for every event."""
        self._any_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._any_handlers:
                self._any_handlers.remove(handler)

        return unsubscribe

    def listener_count(self, event: EventName) -> int:
        return len(self._handlers.get(_event_key(event), []))

    def publish(self, event: EventName, payload: Any = None) -> None:
        key = _event_key(event)
        for handler in list(self._handlers.get(key, [])):
            handler(payload)
        for any_handler in list(self._any_handlers):
            any_handler(key, payload)
