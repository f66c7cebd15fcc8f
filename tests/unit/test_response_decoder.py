from __future__ import annotations

import pytest

from chat_proxy.domain.entities import ChoiceContent, ChoiceShape
from chat_proxy.domain.exceptions import NoResponseError
from chat_proxy.services.response_decoder import (
    decode_choice,
    decode_completion,
    first_choice_text,
)


def test_text_shape_is_preferred() -> None:
    choice = {"text": "direct", "message": {"role": "assistant", "content": "nested"}}

    assert decode_choice(choice) == ChoiceContent(ChoiceShape.TEXT, "direct")


def test_message_shape_is_the_fallback() -> None:
    choice = {"message": {"role": "assistant", "content": "nested"}}

    assert decode_choice(choice) == ChoiceContent(ChoiceShape.MESSAGE, "nested")


def test_empty_text_falls_back_to_message_content() -> None:
    choice = {"text": "", "message": {"content": "nested"}}

    assert decode_choice(choice) == ChoiceContent(ChoiceShape.MESSAGE, "nested")


@pytest.mark.parametrize("choice", [{}, {"message": {"content": None}}, "text", None])
def test_unrecognised_choice_decodes_to_none(choice: object) -> None:
    assert decode_choice(choice) is None


def test_decode_completion_normalizes_body() -> None:
    body = {
        "id": "cmpl-1",
        "object": "text_completion",
        "model": "llama-3",
        "choices": [{"index": 0, "text": " Hi there", "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
    }

    result = decode_completion(body, requested_model="fallback")

    assert result.id == "cmpl-1"
    assert result.model == "llama-3"
    assert result.text == " Hi there"
    assert result.total_tokens == 5


def test_decode_completion_tolerates_sparse_body() -> None:
    result = decode_completion({}, requested_model="fallback")

    assert result.id == ""
    assert result.model == "fallback"
    assert result.choices == []
    assert result.total_tokens is None
    assert result.text == ""


def test_first_choice_text_requires_choices() -> None:
    with pytest.raises(NoResponseError):
        first_choice_text(decode_completion({"choices": []}, requested_model="m"))


def test_first_choice_text_rejects_unusable_choice() -> None:
    with pytest.raises(NoResponseError):
        first_choice_text(decode_completion({"choices": [{"index": 0}]}, requested_model="m"))
