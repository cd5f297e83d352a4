"""Parameter validation for LoopMessage requests.

Every validator raises a 400 :class:`LoopMessageError` on failure. The
``is_*`` helpers are non-raising checks for callers.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence
from urllib.parse import urlparse

from loopmessage_sdk._base import (
    MAX_ATTACHMENTS,
    MAX_PASSTHROUGH_LENGTH,
    MAX_TEXT_LENGTH,
    MIN_TIMEOUT_SECONDS,
)
from loopmessage_sdk.exceptions import LoopMessageError
from loopmessage_sdk.models import MessageEffect, MessageReaction, MessageService, SendMessageParams

# E.164: a leading +, no leading zero, at most 15 digits. The API does
# stricter checks server side.
PHONE_REGEX = re.compile(r"^\+[1-9]\d{1,14}$")
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

EFFECTS = tuple(e.value for e in MessageEffect)
REACTIONS = tuple(r.value for r in MessageReaction)
SERVICES = tuple(s.value for s in MessageService)

_PHONE_NOISE = re.compile(r"[\s\-()]")

_KNOWN_COUNTRY_CODES = ("1", "44", "33", "49", "39", "34", "81", "82", "86", "91")


def _one_of(values: Iterable[str]) -> str:
    return ", ".join(values)


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------


def validate_phone_number(phone: str) -> bool:
    if not PHONE_REGEX.match(phone):
        raise LoopMessageError.invalid_param_error(
            "recipient",
            "Invalid phone number format. Must start with + followed by country code and number",
        )
    return True


def validate_email(email: str) -> bool:
    if not EMAIL_REGEX.match(email):
        raise LoopMessageError.invalid_param_error("recipient", "Invalid email format")
    return True


def validate_recipient(recipient: Optional[str]) -> bool:
    """Emails are anything containing ``@``; everything else must be a phone number."""
    if not recipient:
        return False
    if "@" in recipient:
        return validate_email(recipient)
    return validate_phone_number(recipient)


def validate_message_text(text: Optional[str]) -> bool:
    if not text or not text.strip():
        raise LoopMessageError.missing_param_error("text")
    if len(text) > MAX_TEXT_LENGTH:
        raise LoopMessageError.invalid_param_error(
            "text", f"Text exceeds maximum length of {MAX_TEXT_LENGTH} characters"
        )
    return True


def validate_url(url: str, param_name: str) -> bool:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise LoopMessageError.invalid_param_error(param_name, "Invalid URL format")
    if parsed.scheme != "https":
        raise LoopMessageError.invalid_param_error(param_name, "URL must use HTTPS protocol")
    return True


def validate_attachments(attachments: Optional[Sequence[str]]) -> bool:
    if not attachments:
        return True
    if len(attachments) > MAX_ATTACHMENTS:
        raise LoopMessageError.invalid_param_error(
            "attachments", f"Maximum of {MAX_ATTACHMENTS} attachments allowed"
        )
    for url in attachments:
        validate_url(url, "attachments")
    return True


def validate_passthrough(passthrough: Optional[str]) -> bool:
    if not passthrough:
        return True
    if len(passthrough) > MAX_PASSTHROUGH_LENGTH:
        raise LoopMessageError.invalid_param_error(
            "passthrough",
            f"Passthrough data exceeds maximum length of {MAX_PASSTHROUGH_LENGTH} characters",
        )
    return True


def validate_message_effect(effect: Optional[str]) -> bool:
    if effect and effect not in EFFECTS:
        raise LoopMessageError.invalid_param_error("effect", f"Effect must be one of: {_one_of(EFFECTS)}")
    return True


def validate_message_reaction(reaction: Optional[str]) -> bool:
    if reaction and reaction not in REACTIONS:
        raise LoopMessageError.invalid_param_error(
            "reaction", f"Reaction must be one of: {_one_of(REACTIONS)}"
        )
    return True


def validate_service(service: Optional[str]) -> bool:
    if service and service not in SERVICES:
        raise LoopMessageError.invalid_param_error(
            "service", f"Service must be one of: {_one_of(SERVICES)}"
        )
    return True


# ---------------------------------------------------------------------------
# Full request validation
# ---------------------------------------------------------------------------


def validate_message_params(params: SendMessageParams) -> None:
    """Validate a send request before it goes anywhere near the network."""
    if not params.recipient and not params.group:
        raise LoopMessageError.missing_param_error("recipient or group")
    if params.recipient and params.group:
        raise LoopMessageError.invalid_param_error(
            "recipient and group", "Cannot specify both recipient and group"
        )

    validate_message_text(params.text)

    if params.recipient:
        validate_recipient(params.recipient)

    validate_attachments(params.attachments)

    if params.audio_message and not params.media_url:
        raise LoopMessageError.missing_param_error("media_url (required for audio messages)")

    if params.reaction and not params.message_id:
        raise LoopMessageError.missing_param_error("message_id (required for reactions)")

    if params.effect and params.reaction:
        raise LoopMessageError.invalid_param_error(
            "effect and reaction", "Cannot use both effect and reaction in the same message"
        )

    validate_message_effect(params.effect)
    validate_message_reaction(params.reaction)
    validate_service(params.service)

    if params.service == MessageService.SMS.value:
        if params.subject or params.effect or params.reply_to_id:
            raise LoopMessageError.invalid_param_error(
                "service", "SMS does not support subject, effect, or reply_to_id"
            )
        if params.recipient and "@" in params.recipient:
            raise LoopMessageError.invalid_param_error(
                "recipient", "SMS cannot be sent to email addresses"
            )
        if params.group:
            raise LoopMessageError.invalid_param_error("group", "SMS cannot be sent to groups")

    if params.timeout is not None and params.timeout < MIN_TIMEOUT_SECONDS:
        raise LoopMessageError.invalid_param_error(
            "timeout", f"Timeout must be at least {MIN_TIMEOUT_SECONDS} seconds"
        )

    if params.status_callback:
        validate_url(params.status_callback, "status_callback")

    validate_passthrough(params.passthrough)


# ---------------------------------------------------------------------------
# Phone number utilities
# ---------------------------------------------------------------------------


def is_phone_number(value: str) -> bool:
    return bool(PHONE_REGEX.match(value))


def is_email(value: str) -> bool:
    return bool(EMAIL_REGEX.match(value))


def format_phone_number(phone: str) -> str:
    """Strip spaces, dashes and parentheses and make sure there is a ``+`` prefix.

    >>> format_phone_number("(323) 111-2233")
    '+3231112233'
    """
    cleaned = _PHONE_NOISE.sub("", phone)
    formatted = cleaned if cleaned.startswith("+") else f"+{cleaned}"
    validate_phone_number(formatted)
    return formatted


def get_country_code(phone: str) -> str:
    """Best-effort country calling code for an E.164 number."""
    validate_phone_number(phone)
    digits = phone[1:]

    for code in _KNOWN_COUNTRY_CODES:
        if digits.startswith(code):
            return code

    if len(digits) >= 10:
        return digits[0]
    if len(digits) >= 9:
        return digits[:2]
    if len(digits) >= 8:
        return digits[:3]
    return digits[0]
