"""Shuffled, single-pass study sessions.

Every operation takes a ``SessionState`` and returns a new one; nothing is
kept between calls. ``start`` is the only non-deterministic step and accepts
an injectable random source.
"""

from __future__ import annotations

import random
from typing import Iterable, Optional, Protocol, Sequence

from flashdeck.modules.study.models import Card, Progress, SessionState, StudyView


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def shuffle(cards: Sequence[Card], rng: Optional[RandomSource] = None) -> list[Card]:
    """Fisher-Yates over a copy; ``j`` is drawn from ``[0, i]`` inclusive."""
    rng = rng or random
    order = list(cards)
    for i in range(len(order) - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def start(cards: Iterable[Card], rng: Optional[RandomSource] = None) -> SessionState:
    cards = list(cards)
    if not cards:
        return SessionState(order=[], position=0, revealed=False, finished=True)
    return SessionState(
        order=shuffle(cards, rng), position=0, revealed=False, finished=False
    )


def flip(state: SessionState) -> SessionState:
    if state.finished:
        return state
    return state.model_copy(update={"revealed": not state.revealed})


def advance(state: SessionState) -> SessionState:
    if state.finished:
        return state
    if state.position + 1 < state.total:
        return state.model_copy(
            update={"position": state.position + 1, "revealed": False}
        )
    # Past the last card: position == total keeps finished == (position >= total)
    return state.model_copy(
        update={"position": state.total, "revealed": False, "finished": True}
    )


def current_card(state: SessionState) -> Card | None:
    if state.finished:
        return None
    return state.order[state.position]


def last_card(state: SessionState) -> Card | None:
    """Card most recently shown; still available after the session finishes."""
    if not state.order:
        return None
    return state.order[min(state.position, state.total - 1)]


def progress(state: SessionState) -> Progress:
    total = state.total
    if total == 0:
        raise ValueError("progress is undefined for an empty session")
    current = min(state.position + 1, total)
    return Progress(current=current, total=total, percent=round(current / total * 100))


def view(state: SessionState) -> StudyView:
    return StudyView(
        state=state,
        current_card=current_card(state),
        last_card=last_card(state),
        progress=progress(state) if state.total else None,
    )


__all__ = [
    "RandomSource",
    "shuffle",
    "start",
    "flip",
    "advance",
    "current_card",
    "last_card",
    "progress",
    "view",
]
