from loopmessage_sdk.services.message import LoopMessageService
from loopmessage_sdk.services.status import MessageStatusChecker
from loopmessage_sdk.services.webhooks import WebhookHandler, sign_payload

__all__ = [
    "LoopMessageService",
    "MessageStatusChecker",
    "WebhookHandler",
    "sign_payload",
]
