"""Pydantic request / response DTOs for the API boundary.

Field names are camelCase on the wire and snake_case in Python.  Range
checks are left to the services so that every violated rule is reported
together; the DTOs only enforce types.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chat_proxy.utils.time import utc_timestamp


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ────────────────────────────────────────────────────────────────


class ConfigUpdateRequest(_CamelModel):
    """Request body for ``POST /api/config`` — any subset of the LLM settings."""

    endpoint_url: str | None = None
    auth_token: str | None = None
    default_model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    request_timeout_ms: int | None = None
    enable_logging: bool | None = None


class ApiConfigRequest(_CamelModel):
    """Request body for ``POST /api/config/api``."""

    api_url: str | None = None
    api_token: str | None = None


class CompletionRequestBody(_CamelModel):
    """Request body for ``POST /api/chat/completion``."""

    prompt: str = ""
    model: str | None = None
    max_tokens: int | None = Field(
        default=None, validation_alias=AliasChoices("maxTokens", "max_tokens")
    )
    temperature: float | None = None


class SimpleCompletionRequest(_CamelModel):
    """Request body for ``POST /api/chat/simple``."""

    prompt: str = ""
    max_tokens: int | None = Field(
        default=None, validation_alias=AliasChoices("maxTokens", "max_tokens")
    )


# ── Responses ───────────────────────────────────────────────────────────────


class _Envelope(_CamelModel):
    success: bool = True
    timestamp: str = Field(default_factory=utc_timestamp)


class ConfigStatusBody(_CamelModel):
    configured: bool
    missing_fields: list[str]


class ConfigResponse(_Envelope):
    """``GET /api/config``: masked configuration plus status."""

    config: dict[str, Any]
    status: ConfigStatusBody


class ConfigUpdateResponse(_Envelope):
    """``POST /api/config`` and ``POST /api/config/reset``."""

    message: str
    config: dict[str, Any]


class MessageResponse(_Envelope):
    message: str


class ConfigStatusResponse(_Envelope):
    configured: bool
    missing_fields: list[str]


class CompletionData(_CamelModel):
    id: str
    model: str
    text: str
    total_tokens: int | None = None


class CompletionResponse(_Envelope):
    data: CompletionData


class SimpleCompletionResponse(_Envelope):
    response: str


class ConnectionTestResponse(_Envelope):
    message: str
    response_time_ms: int | None = None


class ErrorResponse(_CamelModel):
    """Standard error envelope returned on all failure paths."""

    error: str
    message: str
    details: list[str] | None = None
    timestamp: str = Field(default_factory=utc_timestamp)
