"""Application configuration — loaded from environment variables."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError, ValidatorFunctionWrapHandler, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Process-level settings loaded from env vars (or ``.env`` file).

    The LLM endpoint settings themselves live in the persisted
    configuration store, not here.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "INFO"
    config_file: Path = Path.home() / ".chat-proxy" / "config.json"


class LlmSeedSettings(BaseSettings):
    """``LLM_*`` variables (env or ``.env``) that seed first run and reset.

    A numeric or boolean variable that does not parse is dropped with a
    warning instead of failing startup; ``None`` means "not set".
    """

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str | None = None
    api_token: SecretStr | None = None
    default_model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    request_timeout: int | None = None
    enable_logging: bool | None = None

    @field_validator(
        "max_tokens", "temperature", "request_timeout", "enable_logging", mode="wrap"
    )
    @classmethod
    def _drop_unparsable(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        try:
            return handler(value)
        except ValidationError as exc:
            logger.warning("Ignoring unparsable LLM setting %r: %s", value, exc.errors()[0]["msg"])
            return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
