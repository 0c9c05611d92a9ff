"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

# Settings are read at import time, so the environment goes first
_tmp = Path(tempfile.mkdtemp(prefix="flashdeck-tests-"))
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MODE", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_KEY_FILE", str(_tmp / "jwt_rsa_key.pem"))

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import flashdeck.core.db.schemas  # noqa: E402,F401
from flashdeck.core.db.base import Base, get_session  # noqa: E402
from flashdeck.core.errors import IdentityError  # noqa: E402
from flashdeck.modules.auth import IdentityClaims, get_identity_verifier  # noqa: E402
from flashdeck.modules.flashcards.generator import get_completion_client  # noqa: E402
from main import app  # noqa: E402


class FakeVerifier:
    """Maps fixed token strings to identity claims."""

    def __init__(self) -> None:
        self.claims = {
            "alice-token": IdentityClaims(
                uid="uid-alice",
                email="alice@example.com",
                name="Alice",
                email_verified=True,
            ),
            "bob-token": IdentityClaims(
                uid="uid-bob", email="bob@example.com", name="Bob"
            ),
        }
        self.calls: list[str] = []

    async def verify(self, id_token: str) -> IdentityClaims:
        self.calls.append(id_token)
        try:
            return self.claims[id_token]
        except KeyError:
            raise IdentityError("Identity token verification failed.")


class FakeCompletion:
    """Completion client returning a canned response."""

    def __init__(self, response: str = "[]") -> None:
        self.response = response
        self.error: Exception | None = None
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database for each test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(test_engine.sync_engine, "connect", _enable_foreign_keys)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
    verifier: FakeVerifier,
    completion: FakeCompletion,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """API client wired to the test database and fake collaborators."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    app.dependency_overrides[get_completion_client] = lambda: completion

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


async def _login(client: httpx.AsyncClient, id_token: str) -> dict[str, str]:
    response = await client.post("/v1/auth/session", json={"idToken": id_token})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
async def alice(client: httpx.AsyncClient) -> dict[str, str]:
    """Auth headers for the first test user."""
    return await _login(client, "alice-token")


@pytest.fixture
async def bob(client: httpx.AsyncClient) -> dict[str, str]:
    """Auth headers for a second, unrelated user."""
    return await _login(client, "bob-token")


@pytest.fixture
async def deck(client: httpx.AsyncClient, alice: dict[str, str]) -> dict:
    response = await client.post(
        "/v1/decks",
        json={"name": "Biology", "description": "Cells and organelles"},
        headers=alice,
    )
    assert response.status_code == 201, response.text
    return response.json()["deck"]
