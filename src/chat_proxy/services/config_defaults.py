"""Resolve the seed configuration from the ``LLM_*`` settings.

Called once at startup.  The result seeds first-run initialization and
every reset.  Values that are unset or violate a configuration bound fall
back to the built-in defaults, so the returned :class:`LLMConfig` always
satisfies the bounds.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from chat_proxy.domain.entities import CONFIG_FIELD_NAMES, DEFAULT_CONFIG, LLMConfig
from chat_proxy.domain.exceptions import ValidationError
from chat_proxy.infrastructure.config import LlmSeedSettings
from chat_proxy.services.config_store import validate_field

logger = logging.getLogger(__name__)


def resolve_default_config(seed: LlmSeedSettings) -> LLMConfig:
    """Build an :class:`LLMConfig` from the ``LLM_*`` seed settings."""
    token = seed.api_token.get_secret_value() if seed.api_token is not None else None
    candidates: dict[str, Any] = {
        "endpoint_url": seed.api_url.strip() if seed.api_url is not None else None,
        "auth_token": token.strip() if token is not None else None,
        "default_model": seed.default_model.strip() if seed.default_model else None,
        "max_tokens": seed.max_tokens,
        "temperature": seed.temperature,
        "request_timeout_ms": seed.request_timeout,
        "enable_logging": seed.enable_logging,
    }

    values = {}
    for attribute, value in candidates.items():
        if value is None:
            continue
        try:
            validate_field(attribute, value)
        except ValidationError as exc:
            logger.warning(
                "Ignoring LLM setting for %s (%s); using default", CONFIG_FIELD_NAMES[attribute], exc
            )
            continue
        values[attribute] = value
    return dataclasses.replace(DEFAULT_CONFIG, **values)
