"""Credential and SDK configuration models.

Configuration is always passed in explicitly. :meth:`LoopSdkConfig.from_env`
is an opt-in bootstrap helper for applications that keep their keys in the
environment or a ``.env`` file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from loopmessage_sdk._base import DEFAULT_TIMEOUT
from loopmessage_sdk.exceptions import LoopMessageError
from loopmessage_sdk.retry import PRODUCTION_RETRY_POLICY, TEST_RETRY_POLICY, RetryPolicy

LogLevel = Literal["debug", "info", "warn", "error", "none"]


class LoopCredentials(BaseModel):
    """API keys shared by every LoopMessage endpoint."""

    model_config = ConfigDict(frozen=True)

    auth_key: str = Field(..., min_length=1)
    secret_key: str = Field(..., min_length=1)
    auth_secret_key: Optional[str] = None
    base_api_url: Optional[str] = None

    @field_validator("base_api_url")
    @classmethod
    def strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value


class LoopSdkConfig(LoopCredentials):
    """Everything :class:`~loopmessage_sdk.sdk.LoopSdk` needs to build its services."""

    sender_name: Optional[str] = None
    auth_api_host: Optional[str] = None
    webhook_secret_key: Optional[str] = None
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    request_timeout: float = Field(DEFAULT_TIMEOUT, gt=0.0)
    log_level: Optional[LogLevel] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Optional[str]) -> Optional[str]:
        """Accept level names in any case, and ``warning`` for ``warn``."""
        if not isinstance(value, str):
            return value
        value = value.strip().lower()
        return "warn" if value == "warning" else value or None

    def credentials(self, base_api_url: Optional[str] = None) -> LoopCredentials:
        return LoopCredentials(
            auth_key=self.auth_key,
            secret_key=self.secret_key,
            auth_secret_key=self.auth_secret_key,
            base_api_url=base_api_url or self.base_api_url,
        )

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None) -> "LoopSdkConfig":
        """Build a config from ``LOOP_*`` environment variables.

        Values from ``dotenv_path`` (or a ``.env`` found by python-dotenv)
        never override variables that are already set.
        """
        load_dotenv(dotenv_path=dotenv_path, override=False)

        def required(name: str) -> str:
            value = os.environ.get(name)
            if not value:
                raise LoopMessageError.missing_param_error(name)
            return value

        policy = TEST_RETRY_POLICY if os.environ.get("LOOP_ENV") == "test" else PRODUCTION_RETRY_POLICY
        log_level = os.environ.get("LOOP_LOG_LEVEL") or None

        fields = dict(
            auth_key=required("LOOP_AUTH_KEY"),
            secret_key=required("LOOP_SECRET_KEY"),
            auth_secret_key=os.environ.get("LOOP_AUTH_SECRET_KEY") or None,
            base_api_url=os.environ.get("LOOP_API_BASE_URL") or None,
            auth_api_host=os.environ.get("LOOP_API_AUTH_HOST") or None,
            sender_name=os.environ.get("LOOP_SENDER_NAME") or None,
            webhook_secret_key=os.environ.get("LOOP_WEBHOOK_SECRET_KEY") or None,
            retry_policy=policy,
            log_level=log_level,
        )
        try:
            return cls(**fields)
        except ValidationError as exc:
            first = exc.errors()[0]
            name = ".".join(str(part) for part in first.get("loc", ())) or "config"
            raise LoopMessageError.invalid_param_error(name, first.get("msg")) from exc
