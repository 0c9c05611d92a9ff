"""Recover flashcard records from raw completion text.

Completion APIs tend to wrap JSON in markdown fences even when told not to,
so the text is cleaned before decoding. Shape validation is strict; records
with degenerate (one-character or blank) fields are dropped silently so one
bad pair doesn't discard the batch.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from flashdeck.core.errors import FlashdeckError
from flashdeck.core.logging import get_logger
from flashdeck.modules.flashcards.models import GeneratedCard

logger = get_logger(__name__)

SNIPPET_LENGTH = 200
MIN_FIELD_LENGTH = 2

_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*")
_TRAILING_FENCE = re.compile(r"```$")


class ParseError(FlashdeckError):
    """Model output couldn't be turned into flashcards."""

    status_code = 502

    def __init__(self, message: str, snippet: str = "") -> None:
        super().__init__(message)
        self.snippet = snippet


def clean(raw: str) -> str:
    """Trim and remove a leading ```lang fence and a trailing ``` fence."""
    text = raw.strip()
    text = _LEADING_FENCE.sub("", text, count=1).lstrip()
    text = _TRAILING_FENCE.sub("", text, count=1).rstrip()
    return text


def _is_card(item: Any) -> bool:
    return (
        isinstance(item, dict)
        and isinstance(item.get("question"), str)
        and isinstance(item.get("answer"), str)
    )


def _long_enough(value: str) -> bool:
    return len(value.strip()) >= MIN_FIELD_LENGTH


class GeneratedCardParser:
    def __init__(self, *, snippet_length: int = SNIPPET_LENGTH) -> None:
        self.snippet_length = snippet_length

    def parse(self, raw: Optional[str]) -> list[GeneratedCard]:
        if not raw:
            logger.info("Parsing skipped: empty completion")
            return []

        text = clean(raw)
        snippet = text[: self.snippet_length]
        if not text.startswith(("[", "{")):
            logger.warning("Cleaned completion is not JSON: %r", snippet[:100])
            raise ParseError("could not extract valid JSON content", snippet)

        try:
            parsed = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            # Deeply nested arrays exhaust the decoder's recursion limit
            raise ParseError(
                f"failed to parse response as JSON; content after cleaning started with: "
                f"{snippet}... parse error: {e}",
                snippet,
            ) from e

        if not isinstance(parsed, list) or not all(_is_card(item) for item in parsed):
            raise ParseError(
                "response structure is not the expected array of question/answer objects",
                snippet,
            )

        cards = [
            GeneratedCard(question=item["question"], answer=item["answer"])
            for item in parsed
            if _long_enough(item["question"]) and _long_enough(item["answer"])
        ]
        if len(cards) < len(parsed):
            logger.info("Dropped %d degenerate cards", len(parsed) - len(cards))
        logger.info("Parsed %d valid flashcards", len(cards))
        return cards


_default_parser = GeneratedCardParser()


def parse(raw: Optional[str]) -> list[GeneratedCard]:
    return _default_parser.parse(raw)


__all__ = ["ParseError", "GeneratedCardParser", "clean", "parse"]
