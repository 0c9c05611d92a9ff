from __future__ import annotations

from fastapi import APIRouter, status

from flashdeck.apis.deps import Completion, CurrentUser, Decks, Flashcards, Parser
from flashdeck.core.config import settings
from flashdeck.core.logging import get_logger
from flashdeck.modules.flashcards.generator import generate_cards
from .schemas import (
    DeckCreate,
    DeckDetail,
    DeckRead,
    DeckResult,
    DeckUpdate,
    FlashcardRead,
    FlashcardResult,
    FlashcardWrite,
    GenerateRequest,
    GenerateResult,
)


router = APIRouter()
logger = get_logger(__name__)

V = settings.app.version

NOTHING_GENERATED = "AI processed the text, but no flashcards could be generated."


@router.get(f"/{V}/decks", response_model=list[DeckRead], tags=["decks"])
async def list_decks(user: CurrentUser, decks: Decks) -> list[DeckRead]:
    return [DeckRead.model_validate(d) for d in await decks.list_decks(user.id)]


@router.post(
    f"/{V}/decks",
    response_model=DeckResult,
    status_code=status.HTTP_201_CREATED,
    tags=["decks"],
)
async def create_deck(req: DeckCreate, user: CurrentUser, decks: Decks) -> DeckResult:
    deck = await decks.create_deck(user.id, req.name, req.description)
    return DeckResult(
        status="success",
        message="Deck created successfully!",
        deck=DeckRead.model_validate(deck),
    )


@router.get(f"/{V}/decks/{{deck_id:int}}", response_model=DeckDetail, tags=["decks"])
async def get_deck(deck_id: int, user: CurrentUser, decks: Decks) -> DeckDetail:
    deck = await decks.get_deck(user.id, deck_id, with_flashcards=True)
    return DeckDetail.model_validate(deck)


@router.patch(f"/{V}/decks/{{deck_id:int}}", response_model=DeckResult, tags=["decks"])
async def update_deck(
    deck_id: int, req: DeckUpdate, user: CurrentUser, decks: Decks
) -> DeckResult:
    changes = req.model_dump(exclude_unset=True)
    if changes.get("name") is None:
        changes.pop("name", None)
    deck = await decks.update_deck(user.id, deck_id, **changes)
    return DeckResult(
        status="success", message="Deck updated.", deck=DeckRead.model_validate(deck)
    )


@router.delete(f"/{V}/decks/{{deck_id:int}}", response_model=DeckResult, tags=["decks"])
async def delete_deck(deck_id: int, user: CurrentUser, decks: Decks) -> DeckResult:
    await decks.delete_deck(user.id, deck_id)
    return DeckResult(status="success", message="Deck deleted.")


@router.get(
    f"/{V}/decks/{{deck_id:int}}/flashcards",
    response_model=list[FlashcardRead],
    tags=["flashcards"],
)
async def list_flashcards(
    deck_id: int, user: CurrentUser, flashcards: Flashcards
) -> list[FlashcardRead]:
    cards = await flashcards.list_flashcards(user.id, deck_id)
    return [FlashcardRead.model_validate(c) for c in cards]


@router.post(
    f"/{V}/decks/{{deck_id:int}}/flashcards",
    response_model=FlashcardResult,
    status_code=status.HTTP_201_CREATED,
    tags=["flashcards"],
)
async def create_flashcard(
    deck_id: int, req: FlashcardWrite, user: CurrentUser, flashcards: Flashcards
) -> FlashcardResult:
    card = await flashcards.create_flashcard(user.id, deck_id, req.question, req.answer)
    return FlashcardResult(
        status="success",
        message="Flashcard created!",
        flashcard=FlashcardRead.model_validate(card),
    )


@router.put(
    f"/{V}/flashcards/{{flashcard_id:int}}",
    response_model=FlashcardResult,
    tags=["flashcards"],
)
async def update_flashcard(
    flashcard_id: int, req: FlashcardWrite, user: CurrentUser, flashcards: Flashcards
) -> FlashcardResult:
    card = await flashcards.update_flashcard(
        user.id, flashcard_id, req.question, req.answer
    )
    return FlashcardResult(
        status="success",
        message="Flashcard updated!",
        flashcard=FlashcardRead.model_validate(card),
    )


@router.delete(
    f"/{V}/flashcards/{{flashcard_id:int}}",
    response_model=FlashcardResult,
    tags=["flashcards"],
)
async def delete_flashcard(
    flashcard_id: int, user: CurrentUser, flashcards: Flashcards
) -> FlashcardResult:
    await flashcards.delete_flashcard(user.id, flashcard_id)
    return FlashcardResult(status="success", message="Flashcard deleted.")


@router.post(
    f"/{V}/decks/{{deck_id:int}}/flashcards/generate",
    response_model=GenerateResult,
    tags=["flashcards"],
)
async def generate_flashcards(
    deck_id: int,
    req: GenerateRequest,
    user: CurrentUser,
    flashcards: Flashcards,
    completion: Completion,
    parser: Parser,
) -> GenerateResult:
    """Generate cards from source text with the completion model and save them to the deck."""
    # Ownership first so nothing is sent to the provider for someone else's deck
    await flashcards.decks.get_deck(user.id, deck_id)

    cards = await generate_cards(req.input_text, completion, parser)
    if not cards:
        return GenerateResult(status="success", message=NOTHING_GENERATED)

    created = await flashcards.add_generated(user.id, deck_id, cards)
    return GenerateResult(
        status="success",
        message=f"Successfully generated and saved {len(created)} flashcards!",
        created_count=len(created),
        flashcards=[FlashcardRead.model_validate(c) for c in created],
    )
