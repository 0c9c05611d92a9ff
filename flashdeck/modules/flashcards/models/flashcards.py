"""Pydantic models for AI-generated flashcards.

Generated records are plain question/answer pairs; deck membership and
ownership are assigned when they are persisted.
"""

from pydantic import BaseModel


class GeneratedCard(BaseModel):
    """Question/answer pair recovered from model output."""

    question: str
    answer: str
