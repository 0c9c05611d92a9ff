from __future__ import annotations

from fastapi import APIRouter

from flashdeck.apis.deps import CurrentUser, Flashcards
from flashdeck.core.config import settings
from flashdeck.modules.study import Card, SessionState, StudyView
from flashdeck.modules.study import session as study


router = APIRouter()


@router.post(
    f"/{settings.app.version}/decks/{{deck_id:int}}/study",
    response_model=StudyView,
    tags=["study"],
)
async def start_study(
    deck_id: int, user: CurrentUser, flashcards: Flashcards
) -> StudyView:
    """Start a shuffled pass over the deck; the client keeps the returned state."""
    cards = await flashcards.list_flashcards(user.id, deck_id)
    state = study.start(
        Card(id=str(c.id), question=c.question, answer=c.answer) for c in cards
    )
    return study.view(state)


@router.post(f"/{settings.app.version}/study/flip", response_model=StudyView, tags=["study"])
async def flip_card(state: SessionState, user: CurrentUser) -> StudyView:
    return study.view(study.flip(state))


@router.post(
    f"/{settings.app.version}/study/advance", response_model=StudyView, tags=["study"]
)
async def advance_card(state: SessionState, user: CurrentUser) -> StudyView:
    return study.view(study.advance(state))
