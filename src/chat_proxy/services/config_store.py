"""Configuration store — owns the persisted LLM settings.

The store keeps one immutable :class:`LLMConfig` snapshot.  Every mutation
validates first, persists through the :class:`ConfigRepository` port and only
then swaps the snapshot, all under one lock, so readers see either the old or
the new configuration and a rejected or failed write changes nothing.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Any, Mapping

from chat_proxy.domain.entities import (
    CONFIG_ATTRIBUTE_NAMES,
    CONFIG_FIELD_NAMES,
    DEFAULT_CONFIG,
    ConfigStatus,
    LLMConfig,
)
from chat_proxy.domain.exceptions import ValidationError
from chat_proxy.domain.ports.config_repository import ConfigRepository

logger = logging.getLogger(__name__)

MAX_TOKENS_RANGE = (1, 4000)
TEMPERATURE_RANGE = (0.0, 2.0)
REQUEST_TIMEOUT_MS_RANGE = (1000, 120_000)

TOKEN_VISIBLE_PREFIX = 10
MASK_MARKER = "..."
NOT_CONFIGURED = "[Not configured]"

_ALLOWED_SCHEMES = ("http://", "https://")


# ── Field validation ────────────────────────────────────────────────────────


def validate_field(attribute: str, value: Any) -> None:
    """Raise :class:`ValidationError` unless *value* is acceptable for *attribute*."""
    name = CONFIG_FIELD_NAMES.get(attribute)
    if name is None:
        raise ValidationError(f"Unknown configuration field: {attribute}", field=attribute)

    if attribute in ("endpoint_url", "auth_token", "default_model"):
        if not isinstance(value, str):
            raise ValidationError(f"{name} must be a string", field=name)
        if attribute == "endpoint_url" and value and not value.startswith(_ALLOWED_SCHEMES):
            raise ValidationError("API URL must start with http:// or https://", field=name)

    elif attribute == "enable_logging":
        if not isinstance(value, bool):
            raise ValidationError(f"{name} must be a boolean", field=name)

    elif attribute == "temperature":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"{name} must be a number", field=name)
        low, high = TEMPERATURE_RANGE
        if not low <= value <= high:
            raise ValidationError("temperature must be between 0 and 2", field=name)

    else:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer", field=name)
        if attribute == "max_tokens":
            low, high = MAX_TOKENS_RANGE
            if not low <= value <= high:
                raise ValidationError("maxTokens must be between 1 and 4000", field=name)
        else:
            low, high = REQUEST_TIMEOUT_MS_RANGE
            if not low <= value <= high:
                raise ValidationError(
                    "requestTimeoutMs must be between 1000ms and 120000ms", field=name
                )


def config_status(config: LLMConfig) -> ConfigStatus:
    """Report which of endpoint URL and auth token are missing, in that order."""
    missing = []
    if not config.endpoint_url:
        missing.append("endpointUrl")
    if not config.auth_token:
        missing.append("authToken")
    return ConfigStatus(configured=not missing, missing_fields=missing)


def mask_token(token: str) -> str:
    """Redact *token* for display; short tokens get no visible prefix at all."""
    if not token:
        return ""
    if len(token) <= 2 * TOKEN_VISIBLE_PREFIX:
        return MASK_MARKER
    return token[:TOKEN_VISIBLE_PREFIX] + MASK_MARKER


# ── Store ───────────────────────────────────────────────────────────────────


class ConfigStore:
    """Process-wide owner of the LLM configuration.

    Parameters
    ----------
    repository:
        Persistence adapter for the configuration file.
    defaults:
        Environment-derived seed used on first run, on a damaged file and
        on :meth:`reset_config`.
    """

    def __init__(self, repository: ConfigRepository, defaults: LLMConfig = DEFAULT_CONFIG) -> None:
        self._repository = repository
        self._defaults = defaults
        self._lock = threading.RLock()
        self._config = self._load()

    # ── Reads ───────────────────────────────────────────────────────────

    def get_config(self) -> LLMConfig:
        return self._config

    def get_masked_config(self) -> dict[str, Any]:
        config = self._config
        data = config.to_camel_dict()
        data["authToken"] = mask_token(config.auth_token)
        data["endpointUrl"] = config.endpoint_url or NOT_CONFIGURED
        return data

    def get_config_status(self) -> ConfigStatus:
        return config_status(self._config)

    def is_configured(self) -> bool:
        return self.get_config_status().configured

    # ── Writes ──────────────────────────────────────────────────────────

    def update_config(self, partial: Mapping[str, Any]) -> None:
        """Validate *partial* (snake_case or camelCase keys), merge and persist."""
        changes = {_attribute(key): value for key, value in partial.items()}
        for attribute, value in changes.items():
            validate_field(attribute, value)

        with self._lock:
            updated = dataclasses.replace(self._config, **changes)
            self._commit(updated)
        logger.info("Configuration updated (%s)", ", ".join(CONFIG_FIELD_NAMES[a] for a in changes))

    def set_api_config(self, url: str, token: str) -> None:
        """Set endpoint URL and token together; both are required."""
        url = (url or "").strip()
        token = (token or "").strip()
        if not url or not url.startswith(_ALLOWED_SCHEMES):
            raise ValidationError(
                "Invalid API URL. Must start with http:// or https://", field="endpointUrl"
            )
        if not token:
            raise ValidationError("API token is required", field="authToken")
        self.update_config({"endpoint_url": url, "auth_token": token})

    def reset_config(self) -> None:
        """Replace the stored configuration with the environment-derived defaults."""
        with self._lock:
            self._commit(self._defaults)
        logger.info("Configuration reset to defaults")

    # ── Internals ───────────────────────────────────────────────────────

    def _commit(self, config: LLMConfig) -> None:
        self._repository.save(config.to_camel_dict())
        self._config = config

    def _load(self) -> LLMConfig:
        stored = self._repository.load()
        if stored is not None:
            try:
                config = _from_stored(stored)
            except ValidationError as exc:
                logger.warning("Stored configuration rejected (%s), reinitializing", exc)
            else:
                logger.info("Configuration loaded")
                return config

        with self._lock:
            self._commit(self._defaults)
        return self._defaults


def _attribute(key: str) -> str:
    if key in CONFIG_FIELD_NAMES:
        return key
    if key in CONFIG_ATTRIBUTE_NAMES:
        return CONFIG_ATTRIBUTE_NAMES[key]
    raise ValidationError(f"Unknown configuration field: {key}", field=key)


def _from_stored(stored: Mapping[str, Any]) -> LLMConfig:
    """Complete a stored camelCase mapping with defaults; unknown keys are dropped."""
    values = {}
    for name, value in stored.items():
        attribute = CONFIG_ATTRIBUTE_NAMES.get(name)
        if attribute is None:
            continue
        validate_field(attribute, value)
        values[attribute] = value
    return dataclasses.replace(DEFAULT_CONFIG, **values)
