from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flashdeck.core.db.base import get_session
from flashdeck.core.db.schemas.auth import User
from flashdeck.core.db_services import DeckService, FlashcardService
from flashdeck.modules.auth import (
    IdentityBridge,
    IdentityVerifier,
    current_active_user,
    get_identity_verifier,
    get_jwt_strategy,
)
from flashdeck.modules.flashcards.generator import (
    CompletionClient,
    get_completion_client,
)
from flashdeck.modules.flashcards.parser import GeneratedCardParser


CurrentUser = Annotated[User, Depends(current_active_user)]


async def get_deck_service(
    session: AsyncSession = Depends(get_session),
) -> DeckService:
    return DeckService(session)


async def get_flashcard_service(
    session: AsyncSession = Depends(get_session),
) -> FlashcardService:
    return FlashcardService(session)


async def get_identity_bridge(
    session: AsyncSession = Depends(get_session),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> IdentityBridge:
    return IdentityBridge(session, verifier, get_jwt_strategy())


def get_card_parser() -> GeneratedCardParser:
    return GeneratedCardParser()


Decks = Annotated[DeckService, Depends(get_deck_service)]
Flashcards = Annotated[FlashcardService, Depends(get_flashcard_service)]
Bridge = Annotated[IdentityBridge, Depends(get_identity_bridge)]
Completion = Annotated[CompletionClient, Depends(get_completion_client)]
Parser = Annotated[GeneratedCardParser, Depends(get_card_parser)]
