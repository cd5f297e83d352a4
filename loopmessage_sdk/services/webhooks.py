"""Inbound webhook verification and parsing.

LoopMessage signs each webhook body with HMAC-SHA256 using the webhook
secret. The signature is checked against the raw body before any JSON is
parsed, so a forged request (401) is never confused with a malformed one
(400).
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import Optional, Union

from pydantic import ValidationError

from loopmessage_sdk._base import _truncate
from loopmessage_sdk.events import EventService, WebhookEvent
from loopmessage_sdk.exceptions import LoopMessageError
from loopmessage_sdk.models import WebhookPayload, webhook_model_for

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("type", "timestamp")


def _has_required_fields(data: object) -> bool:
    """Falsy ``type`` or ``timestamp`` counts as missing; ``type`` must be a string."""
    if not isinstance(data, dict):
        return False
    if not all(data.get(field) for field in _REQUIRED_FIELDS):
        return False
    return isinstance(data["type"], str)


def _as_bytes(body: Union[str, bytes]) -> bytes:
    return body.encode("utf-8") if isinstance(body, str) else body


def sign_payload(body: Union[str, bytes], secret: str) -> str:
    """Compute the HMAC-SHA256 hex digest LoopMessage sends for *body*."""
    return hmac.new(secret.encode(), _as_bytes(body), hashlib.sha256).hexdigest()


class WebhookHandler(EventService):
    """Verifies and parses webhook requests.

    After a successful parse two events fire with the payload: one named
    after the payload's ``type`` (e.g. ``message_inbound``) and the generic
    :attr:`WebhookEvent.WEBHOOK`.
    """

    def __init__(self, webhook_secret_key: Optional[str]):
        super().__init__()
        if not webhook_secret_key:
            raise LoopMessageError.missing_param_error("webhook_secret_key")
        self._secret = webhook_secret_key

    def verify_signature(self, body: Union[str, bytes], signature: str) -> bool:
        expected = sign_payload(body, self._secret)
        return hmac.compare_digest(expected.encode(), signature.encode())

    def parse_webhook(self, body: Union[str, bytes], signature: Optional[str]) -> WebhookPayload:
        """Verify ``signature`` against the raw ``body`` and return the parsed payload."""
        raw = _as_bytes(body)
        self.publish(
            WebhookEvent.WEBHOOK_RECEIVED,
            {"body_length": len(raw), "signature_present": bool(signature)},
        )

        if not signature:
            error = LoopMessageError.invalid_param_error("signature", "Missing webhook signature header")
            self.publish(WebhookEvent.SIGNATURE_ERROR, {"error": error})
            raise error

        if not self.verify_signature(raw, signature):
            logger.warning(f"Webhook signature mismatch (received {_truncate(signature, 12)})")
            error = LoopMessageError.auth_error("Invalid webhook signature")
            self.publish(WebhookEvent.SIGNATURE_ERROR, {"error": error})
            raise error

        self.publish(WebhookEvent.WEBHOOK_VERIFIED, {"body_length": len(raw)})

        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.error(f"Webhook body is not valid JSON: {exc}")
            error = LoopMessageError.invalid_param_error("webhook", "Invalid webhook payload: invalid JSON")
            self.publish(WebhookEvent.WEBHOOK_PARSE_ERROR, {"error": error})
            raise error from exc

        if not _has_required_fields(data):
            error = LoopMessageError.invalid_param_error(
                "webhook", "Invalid webhook payload: missing required fields"
            )
            self.publish(WebhookEvent.WEBHOOK_INVALID, {"error": error, "payload": data})
            raise error

        try:
            payload = webhook_model_for(data["type"]).model_validate(data)
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ()))
            error = LoopMessageError.invalid_param_error(
                "webhook", f"Invalid webhook payload: {field} {first.get('msg')}".strip()
            )
            self.publish(WebhookEvent.WEBHOOK_INVALID, {"error": error, "payload": data})
            raise error from exc

        logger.info(f"Webhook received: {payload.type}")
        self.publish(payload.type, payload)
        self.publish(WebhookEvent.WEBHOOK, payload)
        return payload
