"""Decode OpenAI-completions-like response bodies.

Upstreams answer either in the legacy completions shape
(``choices[].text``) or the chat shape (``choices[].message.content``).
A direct ``text`` is preferred; the nested message content is the fallback.
"""

from __future__ import annotations

from typing import Any, Mapping

from chat_proxy.domain.entities import ChoiceContent, ChoiceShape, CompletionResult
from chat_proxy.domain.exceptions import NoResponseError


def decode_choice(choice: Any) -> ChoiceContent | None:
    """Return the text of one choice, or ``None`` when neither shape matches."""
    if not isinstance(choice, Mapping):
        return None

    text = choice.get("text")
    if isinstance(text, str) and text:
        return ChoiceContent(ChoiceShape.TEXT, text)

    message = choice.get("message")
    if isinstance(message, Mapping) and isinstance(message.get("content"), str):
        return ChoiceContent(ChoiceShape.MESSAGE, message["content"])

    if isinstance(text, str):
        return ChoiceContent(ChoiceShape.TEXT, text)
    return None


def decode_completion(body: Mapping[str, Any], *, requested_model: str) -> CompletionResult:
    """Normalize an upstream body into a :class:`CompletionResult`."""
    raw_choices = body.get("choices")
    if not isinstance(raw_choices, list):
        raw_choices = []

    usage = body.get("usage")
    total_tokens = None
    if isinstance(usage, Mapping):
        value = usage.get("total_tokens")
        if isinstance(value, int) and not isinstance(value, bool):
            total_tokens = value

    model = body.get("model")
    return CompletionResult(
        id=str(body.get("id") or ""),
        model=model if isinstance(model, str) and model else requested_model,
        choices=[decode_choice(c) for c in raw_choices],
        total_tokens=total_tokens,
    )


def first_choice_text(result: CompletionResult) -> str:
    """Plain text of the first choice; raises :class:`NoResponseError` if unusable."""
    if not result.choices:
        raise NoResponseError("No response from LLM")
    content = result.choices[0]
    if content is None:
        raise NoResponseError("No response from LLM: first choice carries no text or message content")
    return content.text
