"""Tests for the API client and optimistic list updates."""

import json

import httpx
import pytest

from flashdeck.client import ClientError, FlashcardList, FlashdeckClient, Snapshot, optimistic


class FakeApi:
    """In-process stand-in for the HTTP API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.tokens_issued = 0
        self.valid_token = None
        self.cards = [
            {"id": 1, "question": "First?", "answer": "One"},
            {"id": 2, "question": "Second?", "answer": "Two"},
        ]
        self.fail_delete = False
        self.requests: list[tuple[str, str]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if request.url.path == "/v1/auth/session":
            if json.loads(request.content)["idToken"] != "good-id-token":
                return httpx.Response(401, json={"status": "error", "message": "Bad token."})
            self.tokens_issued += 1
            self.valid_token = f"session-{self.tokens_issued}"
            return httpx.Response(200, json={"access_token": self.valid_token})

        if request.headers.get("Authorization") != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"detail": "Unauthorized"})

        if request.url.path == "/v1/decks/7/flashcards":
            return httpx.Response(200, json=self.cards)
        if request.method == "DELETE" and request.url.path.startswith("/v1/flashcards/"):
            if self.fail_delete:
                return httpx.Response(
                    502,
                    json={"status": "error", "message": "Database Error: Failed to delete flashcard."},
                )
            card_id = int(request.url.path.rsplit("/", 1)[-1])
            self.cards = [c for c in self.cards if c["id"] != card_id]
            return httpx.Response(200, json={"status": "success", "message": "Flashcard deleted."})
        if request.url.path == "/v1/decks" and request.method == "POST":
            return httpx.Response(
                422,
                json={"status": "error", "message": "Invalid input.", "errors": {"name": ["too short"]}},
            )
        return httpx.Response(404, json={"status": "error", "message": "Not found."})


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
async def api_client(api: FakeApi):
    client = FlashdeckClient(
        "http://flashdeck.test",
        id_token="good-id-token",
        transport=httpx.MockTransport(api.handler),
    )
    async with client:
        yield client


class TestFlashdeckClient:
    """Test suite for FlashdeckClient."""

    async def test_exchanges_identity_token_on_first_call(self, api, api_client) -> None:
        cards = await api_client.list_flashcards(7)
        assert len(cards) == 2
        assert api.requests[0] == ("POST", "/v1/auth/session")
        assert api.tokens_issued == 1

    async def test_reexchanges_after_401(self, api, api_client) -> None:
        await api_client.list_flashcards(7)
        api.valid_token = "rotated"
        await api_client.list_flashcards(7)
        assert api.tokens_issued == 2

    async def test_error_result_raises(self, api_client) -> None:
        with pytest.raises(ClientError) as exc_info:
            await api_client.create_deck("x")
        err = exc_info.value
        assert err.status_code == 422
        assert err.message == "Invalid input."
        assert err.errors == {"name": ["too short"]}

    async def test_bad_identity_token(self, api) -> None:
        client = FlashdeckClient(
            "http://flashdeck.test",
            id_token="expired",
            transport=httpx.MockTransport(api.handler),
        )
        async with client:
            with pytest.raises(ClientError) as exc_info:
                await client.list_decks()
        assert exc_info.value.status_code == 401

    async def test_network_error(self) -> None:
        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = FlashdeckClient(
            "http://flashdeck.test",
            access_token="cached",
            transport=httpx.MockTransport(unreachable),
        )
        async with client:
            with pytest.raises(ClientError) as exc_info:
                await client.list_decks()
        assert exc_info.value.message.startswith("Network error")

    async def test_network_error_during_exchange(self) -> None:
        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = FlashdeckClient(
            "http://flashdeck.test",
            id_token="good-id-token",
            transport=httpx.MockTransport(unreachable),
        )
        async with client:
            with pytest.raises(ClientError) as exc_info:
                await client.list_decks()
        assert exc_info.value.message.startswith("Network error")

    async def test_non_object_error_body(self) -> None:
        def proxy(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json=["upstream", "unavailable"])

        client = FlashdeckClient(
            "http://flashdeck.test",
            access_token="cached",
            transport=httpx.MockTransport(proxy),
        )
        async with client:
            with pytest.raises(ClientError) as exc_info:
                await client.list_decks()
        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Service Unavailable"


class TestOptimistic:
    """Test suite for the optimistic update helper and FlashcardList."""

    async def test_snapshot_restored_on_failure(self) -> None:
        holder = Snapshot([1, 2, 3])
        with pytest.raises(RuntimeError):
            async with optimistic(holder, lambda xs: [x for x in xs if x != 2]) as value:
                assert value == [1, 3]
                raise RuntimeError("server said no")
        assert holder.value == [1, 2, 3]

    async def test_delete_success(self, api, api_client) -> None:
        cards = FlashcardList(api_client, 7)
        await cards.refresh()
        assert await cards.delete(1) is True
        assert [c["id"] for c in cards.cards] == [2]
        assert cards.error is None

    async def test_delete_failure_rolls_back(self, api, api_client) -> None:
        cards = FlashcardList(api_client, 7)
        await cards.refresh()
        api.fail_delete = True
        assert await cards.delete(1) is False
        assert [c["id"] for c in cards.cards] == [1, 2]
        assert cards.error == "Database Error: Failed to delete flashcard."

    async def test_delete_offline_keeps_list_and_reports(self) -> None:
        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = FlashdeckClient(
            "http://flashdeck.test",
            id_token="good-id-token",
            transport=httpx.MockTransport(unreachable),
        )
        async with client:
            cards = FlashcardList(client, 7)
            cards._cards.value = [{"id": 1, "question": "First?", "answer": "One"}]
            assert await cards.delete(1) is False
        assert [c["id"] for c in cards.cards] == [1]
        assert cards.error is not None and cards.error.startswith("Network error")
