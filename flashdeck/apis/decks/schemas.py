from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flashdeck.apis.errors import ActionResult
from flashdeck.core.config import settings


class DeckCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, min_length=2, max_length=200)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, v):
        # Forms send "" for an untouched optional field
        if isinstance(v, str) and not v.strip():
            return None
        return v


class DeckUpdate(DeckCreate):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)


class FlashcardWrite(BaseModel):
    question: str = Field(..., min_length=2, max_length=200)
    answer: str = Field(..., min_length=2, max_length=500)


class GenerateRequest(BaseModel):
    input_text: str = Field(
        ...,
        min_length=settings.generation.min_input_chars,
        max_length=settings.generation.max_input_chars,
    )


class FlashcardRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deck_id: int
    question: str
    answer: str
    created_at: datetime
    updated_at: datetime


class DeckRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DeckDetail(DeckRead):
    flashcards: list[FlashcardRead] = Field(default_factory=list)


class DeckResult(ActionResult):
    deck: Optional[DeckRead] = None


class FlashcardResult(ActionResult):
    flashcard: Optional[FlashcardRead] = None


class GenerateResult(ActionResult):
    created_count: int = 0
    flashcards: list[FlashcardRead] = Field(default_factory=list)
