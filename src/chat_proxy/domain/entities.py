"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

# snake_case attribute → camelCase name used on disk and over HTTP
CONFIG_FIELD_NAMES: dict[str, str] = {
    "endpoint_url": "endpointUrl",
    "auth_token": "authToken",
    "default_model": "defaultModel",
    "max_tokens": "maxTokens",
    "temperature": "temperature",
    "request_timeout_ms": "requestTimeoutMs",
    "enable_logging": "enableLogging",
}

CONFIG_ATTRIBUTE_NAMES: dict[str, str] = {v: k for k, v in CONFIG_FIELD_NAMES.items()}


@dataclass(frozen=True, slots=True)
class LLMConfig:
    """Settings used for every outbound completion call.

    Instances are immutable; the configuration store swaps whole objects so
    a reader always sees one consistent snapshot.
    """

    endpoint_url: str = ""
    auth_token: str = ""
    default_model: str = "meta-llama/Meta-Llama-3-8B"
    max_tokens: int = 150
    temperature: float = 0.3
    request_timeout_ms: int = 30_000
    enable_logging: bool = False

    def to_camel_dict(self) -> dict[str, Any]:
        return {CONFIG_FIELD_NAMES[k]: v for k, v in asdict(self).items()}


DEFAULT_CONFIG = LLMConfig()


@dataclass(frozen=True, slots=True)
class ConfigStatus:
    configured: bool
    missing_fields: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CompletionRequest:
    """A single prompt plus optional per-call overrides.

    ``None`` means "use the configured default"; an empty ``model`` string
    means the same.
    """

    prompt: str
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None


@dataclass(frozen=True, slots=True)
class RequestValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


class ChoiceShape(str, Enum):
    """Which field of an upstream choice carried the generated text."""

    TEXT = "text"
    MESSAGE = "message"


@dataclass(frozen=True, slots=True)
class ChoiceContent:
    """Text decoded from one upstream choice, tagged with its source shape."""

    shape: ChoiceShape
    text: str


@dataclass(frozen=True, slots=True)
class CompletionResult:
    """Normalized upstream completion response."""

    id: str
    model: str
    choices: list[ChoiceContent | None] = field(default_factory=list)
    total_tokens: int | None = None

    @property
    def text(self) -> str:
        """Text of the first choice, or ``""`` when there is none."""
        if self.choices and self.choices[0] is not None:
            return self.choices[0].text
        return ""


@dataclass(frozen=True, slots=True)
class ConnectionTestResult:
    success: bool
    message: str
    response_time_ms: int | None = None
