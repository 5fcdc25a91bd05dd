"""Extraction of generated text from provider-shaped JSON responses."""

from collections.abc import Callable
from typing import Any


def _chat_completion_text(payload: Any) -> Any:
    """``{"choices": [{"message": {"content": ...}}]}``"""
    return payload["choices"][0]["message"]["content"]


def _text_generation_text(payload: Any) -> Any:
    """``[{"generated_text": ...}]``"""
    return payload[0]["generated_text"]


RESPONSE_SHAPES: tuple[Callable[[Any], Any], ...] = (
    _chat_completion_text,
    _text_generation_text,
)


def extract_generated_text(payload: Any) -> str | None:
    """
    Pull the generated text out of a provider response.

    Known shapes are tried in order: the chat-completion ``choices`` object,
    then the flat text-generation array.

    Args:
        payload: Decoded JSON response body

    Returns:
        The generated text, or None if no shape matched or the text is blank
    """
    for shape in RESPONSE_SHAPES:
        try:
            text = shape(payload)
        except (KeyError, IndexError, TypeError):
            continue
        if isinstance(text, str) and text.strip():
            return text
    return None
