"""Database service classes for decks and flashcards.

Every mutation looks the record up scoped to the acting user first, so a
record owned by someone else is indistinguishable from a missing one.
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flashdeck.core.db.schemas.decks import Deck, Flashcard
from flashdeck.core.errors import NotFoundOrDenied, UpstreamError
from flashdeck.core.logging import get_logger
from flashdeck.modules.flashcards.models import GeneratedCard

logger = get_logger(__name__)


class _Service:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"{action} failed: {e}")
            raise UpstreamError(f"Database Error: Failed to {action}.") from e


class DeckService(_Service):
    """Service for managing a user's decks."""

    async def list_decks(self, user_id: int) -> list[Deck]:
        result = await self.session.execute(
            select(Deck).where(Deck.user_id == user_id).order_by(Deck.name.asc())
        )
        return list(result.scalars().all())

    async def get_deck(
        self, user_id: int, deck_id: int, *, with_flashcards: bool = False
    ) -> Deck:
        query = select(Deck).where(Deck.id == deck_id, Deck.user_id == user_id)
        if with_flashcards:
            query = query.options(selectinload(Deck.flashcards))
        result = await self.session.execute(query)
        deck = result.scalar_one_or_none()
        if deck is None:
            raise NotFoundOrDenied("Deck")
        return deck

    async def create_deck(
        self, user_id: int, name: str, description: Optional[str] = None
    ) -> Deck:
        deck = Deck(user_id=user_id, name=name, description=description)
        self.session.add(deck)
        await self._commit("create deck")
        await self.session.refresh(deck)
        logger.info(f"Created deck {deck.id} '{name}'", extra={"user_id": user_id})
        return deck

    async def update_deck(self, user_id: int, deck_id: int, **changes) -> Deck:
        deck = await self.get_deck(user_id, deck_id)
        for field, value in changes.items():
            setattr(deck, field, value)
        await self._commit("update deck")
        await self.session.refresh(deck)
        return deck

    async def delete_deck(self, user_id: int, deck_id: int) -> None:
        # Loading the cards lets the ORM cascade even where the FK doesn't
        deck = await self.get_deck(user_id, deck_id, with_flashcards=True)
        await self.session.delete(deck)
        await self._commit("delete deck")
        logger.info(f"Deleted deck {deck_id}", extra={"user_id": user_id})


class FlashcardService(_Service):
    """Service for managing flashcards inside a user's decks."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.decks = DeckService(session)

    async def list_flashcards(self, user_id: int, deck_id: int) -> list[Flashcard]:
        await self.decks.get_deck(user_id, deck_id)
        result = await self.session.execute(
            select(Flashcard)
            .where(Flashcard.deck_id == deck_id, Flashcard.user_id == user_id)
            .order_by(Flashcard.id.asc())
        )
        return list(result.scalars().all())

    async def get_flashcard(self, user_id: int, flashcard_id: int) -> Flashcard:
        result = await self.session.execute(
            select(Flashcard).where(
                Flashcard.id == flashcard_id, Flashcard.user_id == user_id
            )
        )
        card = result.scalar_one_or_none()
        if card is None:
            raise NotFoundOrDenied("Flashcard")
        return card

    async def create_flashcard(
        self, user_id: int, deck_id: int, question: str, answer: str
    ) -> Flashcard:
        await self.decks.get_deck(user_id, deck_id)
        card = Flashcard(
            deck_id=deck_id, user_id=user_id, question=question, answer=answer
        )
        self.session.add(card)
        await self._commit("create flashcard")
        await self.session.refresh(card)
        return card

    async def update_flashcard(
        self, user_id: int, flashcard_id: int, question: str, answer: str
    ) -> Flashcard:
        card = await self.get_flashcard(user_id, flashcard_id)
        card.question = question
        card.answer = answer
        await self._commit("update flashcard")
        await self.session.refresh(card)
        return card

    async def delete_flashcard(self, user_id: int, flashcard_id: int) -> Flashcard:
        card = await self.get_flashcard(user_id, flashcard_id)
        await self.session.delete(card)
        await self._commit("delete flashcard")
        return card

    async def add_generated(
        self, user_id: int, deck_id: int, cards: Iterable[GeneratedCard]
    ) -> list[Flashcard]:
        """Bulk insert generated cards, skipping question/answer pairs already present."""
        existing = await self.list_flashcards(user_id, deck_id)
        seen = {(c.question, c.answer) for c in existing}

        created: list[Flashcard] = []
        for card in cards:
            key = (card.question, card.answer)
            if key in seen:
                continue
            seen.add(key)
            created.append(
                Flashcard(
                    deck_id=deck_id,
                    user_id=user_id,
                    question=card.question,
                    answer=card.answer,
                )
            )

        self.session.add_all(created)
        await self._commit("save generated flashcards")
        for card in created:
            await self.session.refresh(card)
        logger.info(
            f"Saved {len(created)} generated flashcards to deck {deck_id}",
            extra={"user_id": user_id},
        )
        return created
