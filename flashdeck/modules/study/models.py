"""Pydantic models for study sessions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    answer: str


class SessionState(BaseModel):
    """One study pass; callers hold on to it between transitions."""

    model_config = ConfigDict(frozen=True)

    order: list[Card] = Field(default_factory=list)
    position: int = Field(default=0, ge=0)
    revealed: bool = False
    finished: bool = True

    @property
    def total(self) -> int:
        return len(self.order)

    @model_validator(mode="after")
    def _check_position(self) -> "SessionState":
        if self.position > len(self.order):
            raise ValueError("position is past the end of the session")
        if self.finished != (self.position >= len(self.order)):
            raise ValueError("finished must match position >= total")
        return self


class Progress(BaseModel):
    current: int
    total: int
    percent: int


class StudyView(BaseModel):
    state: SessionState
    current_card: Card | None = None
    # Stays set after the session finishes, for a "last card" display
    last_card: Card | None = None
    progress: Progress | None = None
