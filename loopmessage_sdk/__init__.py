"""LoopMessage SDK - async Python client for the LoopMessage iMessage/SMS API."""

import logging

from loopmessage_sdk.config import LoopCredentials, LoopSdkConfig
from loopmessage_sdk.events import ERROR_EVENT, EventService, MessageEvent, StatusEvent, WebhookEvent
from loopmessage_sdk.exceptions import LoopMessageError
from loopmessage_sdk.http_client import EndpointType, LoopHttpClient
from loopmessage_sdk.log import set_log_level
from loopmessage_sdk.models import (
    AuthResponse,
    MessageEffect,
    MessageReaction,
    MessageService,
    MessageStatus,
    MessageStatusResponse,
    SendMessageParams,
    SendMessageResponse,
    WebhookPayload,
    WebhookType,
)
from loopmessage_sdk.retry import (
    PRODUCTION_RETRY_POLICY,
    TEST_RETRY_POLICY,
    RetryPolicy,
    retry_with_exponential_backoff,
)
from loopmessage_sdk.sdk import LoopSdk
from loopmessage_sdk.services import LoopMessageService, MessageStatusChecker, WebhookHandler, sign_payload
from loopmessage_sdk.validators import (
    format_phone_number,
    get_country_code,
    is_email,
    is_phone_number,
    validate_message_params,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "LoopSdk",
    "LoopSdkConfig",
    "LoopCredentials",
    "LoopMessageError",
    "LoopHttpClient",
    "EndpointType",
    "LoopMessageService",
    "MessageStatusChecker",
    "WebhookHandler",
    "sign_payload",
    "EventService",
    "ERROR_EVENT",
    "MessageEvent",
    "StatusEvent",
    "WebhookEvent",
    "RetryPolicy",
    "PRODUCTION_RETRY_POLICY",
    "TEST_RETRY_POLICY",
    "retry_with_exponential_backoff",
    "SendMessageParams",
    "SendMessageResponse",
    "AuthResponse",
    "MessageStatusResponse",
    "WebhookPayload",
    "MessageStatus",
    "MessageEffect",
    "MessageReaction",
    "MessageService",
    "WebhookType",
    "validate_message_params",
    "is_phone_number",
    "is_email",
    "format_phone_number",
    "get_country_code",
    "set_log_level",
]

__version__ = "0.1.0"
