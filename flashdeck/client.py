"""Flashdeck REST API client with identity-token session exchange.

``FlashcardList`` keeps a local copy of a deck's cards and applies deletes
optimistically: the card disappears locally first and the previous list is
restored if the server call fails.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional, TypeVar

import httpx

from flashdeck.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ClientError(Exception):
    """Error result returned by the API (or a transport failure)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[dict[str, list[str]]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}


class Snapshot:
    """Mutable holder for a value that can be optimistically changed."""

    def __init__(self, value: Any) -> None:
        self.value = value


@asynccontextmanager
async def optimistic(
    holder: Snapshot, mutate: Callable[[T], T]
) -> AsyncIterator[T]:
    """Snapshot ``holder.value``, apply ``mutate``, restore the snapshot on failure."""
    snapshot = holder.value
    holder.value = mutate(snapshot)
    try:
        yield holder.value
    except BaseException:
        holder.value = snapshot
        raise


class FlashdeckClient:
    """HTTP client for the Flashdeck API.

    Exchanges an identity token for a session token on first use and again
    whenever the API answers 401.
    """

    def __init__(
        self,
        base_url: str,
        *,
        id_token: Optional[str] = None,
        access_token: Optional[str] = None,
        version: str = "v1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.version = version
        self.id_token = id_token
        self._access_token = access_token
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=30.0, transport=transport
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "FlashdeckClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _exchange(self) -> None:
        """Trade the identity token for a session token."""
        if not self.id_token:
            raise ClientError("Not logged in.", 401)
        try:
            response = await self._client.post(
                f"/{self.version}/auth/session", json={"idToken": self.id_token}
            )
        except httpx.HTTPError as e:
            raise ClientError(f"Network error: {e}") from e
        _raise_for_result(response)
        self._access_token = response.json()["access_token"]
        logger.info("Authenticated with Flashdeck API")

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Make an authenticated API request with automatic session exchange."""
        if not self._access_token:
            await self._exchange()

        url = f"/{self.version}{path}"
        try:
            headers = {"Authorization": f"Bearer {self._access_token}"}
            response = await self._client.request(method, url, headers=headers, **kwargs)

            if response.status_code == 401 and self.id_token:
                await self._exchange()
                headers = {"Authorization": f"Bearer {self._access_token}"}
                response = await self._client.request(
                    method, url, headers=headers, **kwargs
                )
        except httpx.HTTPError as e:
            raise ClientError(f"Network error: {e}") from e

        _raise_for_result(response)
        return response

    # --- Deck endpoints ---

    async def list_decks(self) -> list[dict]:
        return (await self._request("GET", "/decks")).json()

    async def get_deck(self, deck_id: int) -> dict:
        return (await self._request("GET", f"/decks/{deck_id}")).json()

    async def create_deck(self, name: str, description: Optional[str] = None) -> dict:
        response = await self._request(
            "POST", "/decks", json={"name": name, "description": description}
        )
        return response.json()["deck"]

    async def delete_deck(self, deck_id: int) -> None:
        await self._request("DELETE", f"/decks/{deck_id}")

    # --- Flashcard endpoints ---

    async def list_flashcards(self, deck_id: int) -> list[dict]:
        return (await self._request("GET", f"/decks/{deck_id}/flashcards")).json()

    async def create_flashcard(self, deck_id: int, question: str, answer: str) -> dict:
        response = await self._request(
            "POST",
            f"/decks/{deck_id}/flashcards",
            json={"question": question, "answer": answer},
        )
        return response.json()["flashcard"]

    async def update_flashcard(
        self, flashcard_id: int, question: str, answer: str
    ) -> dict:
        response = await self._request(
            "PUT",
            f"/flashcards/{flashcard_id}",
            json={"question": question, "answer": answer},
        )
        return response.json()["flashcard"]

    async def delete_flashcard(self, flashcard_id: int) -> None:
        await self._request("DELETE", f"/flashcards/{flashcard_id}")

    async def generate_flashcards(self, deck_id: int, input_text: str) -> dict:
        response = await self._request(
            "POST",
            f"/decks/{deck_id}/flashcards/generate",
            json={"input_text": input_text},
        )
        return response.json()

    async def extract_document(self, filename: str, data: bytes) -> dict:
        response = await self._request(
            "POST",
            "/documents/extract",
            files={"file": (filename, data, "application/pdf")},
        )
        return response.json()

    # --- Study endpoints ---

    async def start_study(self, deck_id: int) -> dict:
        return (await self._request("POST", f"/decks/{deck_id}/study")).json()

    async def flip(self, state: dict) -> dict:
        return (await self._request("POST", "/study/flip", json=state)).json()

    async def advance(self, state: dict) -> dict:
        return (await self._request("POST", "/study/advance", json=state)).json()


def _raise_for_result(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("message") or body.get("detail") or response.reason_phrase
    raise ClientError(str(message), response.status_code, body.get("errors"))


class FlashcardList:
    """Local view of one deck's flashcards."""

    def __init__(self, client: FlashdeckClient, deck_id: int) -> None:
        self.client = client
        self.deck_id = deck_id
        self._cards = Snapshot([])
        self.error: Optional[str] = None

    @property
    def cards(self) -> list[dict]:
        return self._cards.value

    async def refresh(self) -> list[dict]:
        self._cards.value = await self.client.list_flashcards(self.deck_id)
        return self.cards

    async def delete(self, flashcard_id: int) -> bool:
        """Remove locally, then on the server; on error restore and keep the message."""
        self.error = None
        try:
            async with optimistic(
                self._cards,
                lambda cards: [c for c in cards if c["id"] != flashcard_id],
            ):
                await self.client.delete_flashcard(flashcard_id)
        except ClientError as e:
            logger.warning(f"Delete of flashcard {flashcard_id} rolled back: {e.message}")
            self.error = e.message
            return False
        return True
