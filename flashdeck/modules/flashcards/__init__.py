"""Flashcards module exports."""

from .models.flashcards import GeneratedCard
from .parser import GeneratedCardParser, ParseError, parse
from .generator import AgentCompletionClient, CompletionClient, generate_cards

__all__ = [
    "GeneratedCard",
    "GeneratedCardParser",
    "ParseError",
    "parse",
    "AgentCompletionClient",
    "CompletionClient",
    "generate_cards",
]
