"""Application configuration using Pydantic Settings."""

from __future__ import annotations

import logging
import re
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from smsdispatch.common.constants import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_BRAND_NAME,
    DEFAULT_COUNTRY_CODE,
    DEFAULT_INITIAL_BACKOFF_SECONDS,
    DEFAULT_LATENCY_SENSITIVE_MAX_ATTEMPTS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_BACKOFF_SECONDS,
    DEFAULT_MAX_TOTAL_WAIT_SECONDS,
    MAX_SEGMENT_LENGTH,
    NANP_PATTERN,
)


class SmsDispatchConfig(BaseSettings):
    """Dispatch configuration loaded from environment variables."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    brand_name: str = Field(default=DEFAULT_BRAND_NAME, min_length=1)
    max_message_length: int = Field(default=MAX_SEGMENT_LENGTH, ge=1)

    default_country_code: str = Field(default=DEFAULT_COUNTRY_CODE, pattern=r"^[0-9]{1,3}$")
    phone_pattern: str = NANP_PATTERN

    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    latency_sensitive_max_attempts: int = Field(
        default=DEFAULT_LATENCY_SENSITIVE_MAX_ATTEMPTS, ge=1,
    )
    initial_backoff_seconds: float = Field(default=DEFAULT_INITIAL_BACKOFF_SECONDS, ge=0.0)
    backoff_multiplier: float = Field(default=DEFAULT_BACKOFF_MULTIPLIER, ge=1.0)
    max_backoff_seconds: float = Field(default=DEFAULT_MAX_BACKOFF_SECONDS, ge=0.0)
    max_total_wait_seconds: float = Field(default=DEFAULT_MAX_TOTAL_WAIT_SECONDS, ge=0.0)

    model_config = {"env_prefix": "SMSDISPATCH_", "case_sensitive": False}

    @field_validator("phone_pattern")
    @classmethod
    def validate_phone_pattern(cls, v: str) -> str:
        """Reject patterns that do not compile."""
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"phone_pattern is not a valid regex: {exc}") from exc
        return v

    @model_validator(mode="after")
    def check_retry_budgets(self) -> SmsDispatchConfig:
        """Latency-sensitive kinds may never retry more than the standard policy."""
        if self.latency_sensitive_max_attempts > self.max_attempts:
            raise ValueError(
                "latency_sensitive_max_attempts cannot exceed max_attempts "
                f"({self.latency_sensitive_max_attempts} > {self.max_attempts})"
            )
        return self


def configure_logging(config: SmsDispatchConfig | None = None) -> None:
    """Apply the configured log level to the root logger."""
    config = config or SmsDispatchConfig()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["SmsDispatchConfig", "configure_logging"]
