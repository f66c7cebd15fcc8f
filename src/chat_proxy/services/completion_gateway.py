"""Completion gateway — validates, merges with configuration, calls upstream.

The gateway holds no per-request state.  It depends only on the
:class:`ConfigStore` and the :class:`CompletionClient` port; the interface
layer injects concrete adapters at runtime.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from chat_proxy.domain.entities import (
    CompletionRequest,
    CompletionResult,
    ConnectionTestResult,
    LLMConfig,
    RequestValidation,
)
from chat_proxy.domain.exceptions import (
    ChatProxyError,
    ConfigurationError,
    RequestError,
    ValidationError,
)
from chat_proxy.domain.ports.completion_client import CompletionClient
from chat_proxy.services.config_store import (
    MAX_TOKENS_RANGE,
    TEMPERATURE_RANGE,
    ConfigStore,
    config_status,
)
from chat_proxy.services.response_decoder import decode_completion, first_choice_text

logger = logging.getLogger(__name__)

MAX_PROMPT_LENGTH = 10_000

CONNECTION_TEST_PROMPT = (
    "Hello, this is a connection test. Please respond with 'Connection successful'."
)
CONNECTION_TEST_MAX_TOKENS = 20
PREVIEW_LENGTH = 100


class CompletionGateway:
    """Stateless orchestrator for outbound completion calls.

    Parameters
    ----------
    config_store:
        Source of endpoint, token and sampling defaults, read on every call.
    client:
        Adapter that performs the authenticated HTTP POST.
    """

    def __init__(self, config_store: ConfigStore, client: CompletionClient) -> None:
        self._config_store = config_store
        self._client = client

    # ── Validation ──────────────────────────────────────────────────────

    def validate_request(self, request: CompletionRequest) -> RequestValidation:
        """Check every rule and report all violations at once."""
        errors: list[str] = []
        prompt = request.prompt if isinstance(request.prompt, str) else ""

        if not prompt.strip():
            errors.append("Prompt is required and cannot be empty")
        if len(prompt) > MAX_PROMPT_LENGTH:
            errors.append("Prompt is too long (maximum 10,000 characters)")

        max_tokens = request.max_tokens
        if max_tokens is not None:
            low, high = MAX_TOKENS_RANGE
            if (
                isinstance(max_tokens, bool)
                or not isinstance(max_tokens, int)
                or not low <= max_tokens <= high
            ):
                errors.append("max_tokens must be between 1 and 4000")

        temperature = request.temperature
        if temperature is not None:
            low, high = TEMPERATURE_RANGE
            if (
                isinstance(temperature, bool)
                or not isinstance(temperature, (int, float))
                or not low <= temperature <= high
            ):
                errors.append("temperature must be between 0 and 2")

        return RequestValidation(valid=not errors, errors=errors)

    # ── Calls ───────────────────────────────────────────────────────────

    async def send_chat_completion(self, request: CompletionRequest) -> CompletionResult:
        """Validate, merge over stored defaults and issue one upstream call."""
        validation = self.validate_request(request)
        if not validation.valid:
            raise ValidationError.from_messages(validation.errors)

        config = self._config_store.get_config()
        status = config_status(config)
        if not status.configured:
            raise ConfigurationError(status.missing_fields)

        payload = _build_payload(request, config)
        log = logger.info if config.enable_logging else logger.debug
        log("Sending completion request to %s (model=%s)", config.endpoint_url, payload["model"])

        try:
            body = await self._client.post_completion(
                config.endpoint_url,
                config.auth_token,
                payload,
                timeout_ms=config.request_timeout_ms,
            )
            result = decode_completion(body, requested_model=payload["model"])
        except ChatProxyError:
            raise
        except Exception as exc:
            raise RequestError(f"Request failed: {exc}") from exc

        log(
            "LLM response received (%s tokens)",
            result.total_tokens if result.total_tokens is not None else "unknown",
        )
        return result

    async def send_completion(self, prompt: str, max_tokens: int | None = None) -> str:
        """Return just the text of the first choice for *prompt*."""
        result = await self.send_chat_completion(
            CompletionRequest(prompt=prompt, max_tokens=max_tokens)
        )
        return first_choice_text(result)

    async def test_connection(self) -> ConnectionTestResult:
        """Round-trip a short fixed prompt; never raises."""
        started = time.perf_counter()
        try:
            text = await self.send_completion(CONNECTION_TEST_PROMPT, CONNECTION_TEST_MAX_TOKENS)
        except Exception as exc:
            logger.warning("Connection test failed: %s", exc)
            return ConnectionTestResult(success=False, message=f"Connection failed: {exc}")

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return ConnectionTestResult(
            success=True,
            message=f"Connection successful! Response: {text[:PREVIEW_LENGTH]}...",
            response_time_ms=elapsed_ms,
        )


def _build_payload(request: CompletionRequest, config: LLMConfig) -> dict[str, Any]:
    """Request fields win when present; configured defaults fill the rest."""
    return {
        "model": request.model or config.default_model,
        "prompt": request.prompt,
        "max_tokens": request.max_tokens if request.max_tokens is not None else config.max_tokens,
        "temperature": (
            request.temperature if request.temperature is not None else config.temperature
        ),
    }
