"""
Request, response and webhook models for the LoopMessage API.

Response and webhook models keep unknown provider fields (``extra="allow"``)
so nothing the API returns is dropped. Request parameters reject unknown
keys so typos fail before any network call.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from loopmessage_sdk.exceptions import LoopMessageError


class MessageStatus(str, Enum):
    PROCESSING = "processing"  # accepted, being processed
    SCHEDULED = "scheduled"  # processed and scheduled for sending
    FAILED = "failed"
    SENT = "sent"  # delivered to the recipient
    TIMEOUT = "timeout"  # minimum send time elapsed
    UNKNOWN = "unknown"


class MessageEffect(str, Enum):
    SLAM = "slam"
    LOUD = "loud"
    GENTLE = "gentle"
    INVISIBLE_INK = "invisibleInk"
    ECHO = "echo"
    SPOTLIGHT = "spotlight"
    BALLOONS = "balloons"
    CONFETTI = "confetti"
    LOVE = "love"
    LASERS = "lasers"
    FIREWORKS = "fireworks"
    SHOOTING_STAR = "shootingStar"
    CELEBRATION = "celebration"


class MessageReaction(str, Enum):
    """Reactions; the ``-`` prefixed values remove a reaction."""

    LOVE = "love"
    LIKE = "like"
    DISLIKE = "dislike"
    LAUGH = "laugh"
    EXCLAIM = "exclaim"
    QUESTION = "question"
    REMOVE_LOVE = "-love"
    REMOVE_LIKE = "-like"
    REMOVE_DISLIKE = "-dislike"
    REMOVE_LAUGH = "-laugh"
    REMOVE_EXCLAIM = "-exclaim"
    REMOVE_QUESTION = "-question"


class MessageService(str, Enum):
    IMESSAGE = "imessage"
    SMS = "sms"


class WebhookType(str, Enum):
    MESSAGE_SCHEDULE = "message_schedule"
    MESSAGE_SENT = "message_sent"
    MESSAGE_FAILED = "message_failed"
    MESSAGE_INBOUND = "message_inbound"
    MESSAGE_TIMEOUT = "message_timeout"
    MESSAGE_REACTION = "message_reaction"
    CONVERSATION_INITED = "conversation_inited"
    GROUP_CREATED = "group_created"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class SendMessageParams(BaseModel):
    """Parameters for ``POST /api/v1/message/send/``.

    Enum-valued fields are plain strings here; their allowed values are
    checked by :mod:`loopmessage_sdk.validators` so that every rejection is a
    ``LoopMessageError`` with a useful message.
    """

    model_config = ConfigDict(extra="forbid")

    recipient: Optional[str] = None  # phone number or email
    group: Optional[str] = None
    text: Optional[str] = None
    sender_name: Optional[str] = None

    attachments: Optional[List[str]] = None  # public https URLs
    subject: Optional[str] = None
    effect: Optional[str] = None

    media_url: Optional[str] = None
    audio_message: Optional[bool] = None

    reply_to_id: Optional[str] = None
    message_id: Optional[str] = None  # message to react to
    reaction: Optional[str] = None

    timeout: Optional[int] = None  # seconds
    service: Optional[str] = None

    status_callback: Optional[str] = None
    status_callback_header: Optional[str] = None
    passthrough: Optional[str] = None

    @field_validator("effect", "reaction", "service", mode="before")
    @classmethod
    def enum_to_value(cls, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value

    def to_request(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class GroupInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    group_id: str
    name: Optional[str] = None
    participants: List[str] = Field(default_factory=list)


class SendMessageResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    message_id: str
    success: bool
    recipient: Optional[str] = None
    group: Optional[GroupInfo] = None
    text: Optional[str] = None
    message: Optional[str] = None  # error description on failure


class AuthResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    imessage_link: Optional[str] = None
    request_id: Optional[str] = None
    success: bool
    message: Optional[str] = None


class MessageStatusResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    message_id: str
    status: MessageStatus
    recipient: Optional[str] = None
    text: Optional[str] = None
    sandbox: Optional[bool] = None
    error_code: Optional[int] = None
    sender_name: Optional[str] = None
    passthrough: Optional[str] = None
    last_update: Optional[str] = None  # ISO datetime

    @field_validator("status", mode="before")
    @classmethod
    def unknown_status(cls, value: Any) -> Any:
        """Statuses outside the documented set are read as ``unknown``."""
        if isinstance(value, MessageStatus):
            return value
        try:
            return MessageStatus(value)
        except ValueError:
            return MessageStatus.UNKNOWN


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


class WebhookPayload(BaseModel):
    """Fields every webhook carries. Unknown webhook types parse into this."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    timestamp: Union[str, int, float]


class MessageStatusWebhook(WebhookPayload):
    type: Literal["message_sent", "message_failed", "message_timeout", "message_schedule"]
    message_id: str
    recipient: Optional[str] = None
    group_id: Optional[str] = None
    text: Optional[str] = None
    error_code: Optional[int] = None
    error_message: Optional[str] = None
    passthrough: Optional[str] = None


class MessageReactionWebhook(WebhookPayload):
    type: Literal["message_reaction"]
    message_id: str
    recipient: str
    reaction: str
    from_: Optional[str] = Field(None, alias="from")
    passthrough: Optional[str] = None


class InboundMessageWebhook(WebhookPayload):
    type: Literal["message_inbound"]
    from_: str = Field(..., alias="from")
    text: str
    group_id: Optional[str] = None
    attachments: Optional[List[str]] = None
    reply_to_id: Optional[str] = None
    passthrough: Optional[str] = None


class GroupCreatedWebhook(WebhookPayload):
    type: Literal["group_created"]
    group_id: str
    group_name: Optional[str] = None
    participants: List[str]
    creator: Optional[str] = None
    passthrough: Optional[str] = None


class ConversationInitedWebhook(WebhookPayload):
    type: Literal["conversation_inited"]
    recipient: str
    passthrough: Optional[str] = None


WEBHOOK_MODELS: Dict[str, Type[WebhookPayload]] = {
    WebhookType.MESSAGE_SCHEDULE.value: MessageStatusWebhook,
    WebhookType.MESSAGE_SENT.value: MessageStatusWebhook,
    WebhookType.MESSAGE_FAILED.value: MessageStatusWebhook,
    WebhookType.MESSAGE_TIMEOUT.value: MessageStatusWebhook,
    WebhookType.MESSAGE_REACTION.value: MessageReactionWebhook,
    WebhookType.MESSAGE_INBOUND.value: InboundMessageWebhook,
    WebhookType.GROUP_CREATED.value: GroupCreatedWebhook,
    WebhookType.CONVERSATION_INITED.value: ConversationInitedWebhook,
}


def webhook_model_for(webhook_type: str) -> Type[WebhookPayload]:
    return WEBHOOK_MODELS.get(webhook_type, WebhookPayload)


M = TypeVar("M", bound=BaseModel)


def parse_api_response(model: Type[M], body: Any) -> M:
    """Validate a decoded API body, reporting a malformed one as a server error."""
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise LoopMessageError("Unexpected API response", 500, str(exc)) from exc
