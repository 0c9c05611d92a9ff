"""Tests for identity-token exchange and session tokens."""

import jwt

from conftest import FakeVerifier
from flashdeck.modules.auth import IdentityClaims


class TestSessionExchange:
    """Test suite for POST /v1/auth/session."""

    async def test_first_login_creates_user(self, client, verifier) -> None:
        response = await client.post("/v1/auth/session", json={"idToken": "alice-token"})
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["name"] == "Alice"
        assert body["user"]["is_verified"] is True
        assert verifier.calls == ["alice-token"]

    async def test_repeat_login_reuses_user(self, client) -> None:
        first = await client.post("/v1/auth/session", json={"idToken": "alice-token"})
        second = await client.post("/v1/auth/session", json={"idToken": "alice-token"})
        assert first.json()["user"]["id"] == second.json()["user"]["id"]

    async def test_profile_changes_are_synced(self, client, verifier: FakeVerifier) -> None:
        await client.post("/v1/auth/session", json={"idToken": "bob-token"})
        verifier.claims["bob-token"] = IdentityClaims(
            uid="uid-bob",
            email="robert@example.com",
            name="Robert",
            picture="https://example.com/bob.png",
        )
        response = await client.post("/v1/auth/session", json={"idToken": "bob-token"})
        user = response.json()["user"]
        assert user["email"] == "robert@example.com"
        assert user["name"] == "Robert"
        assert user["avatar_url"] == "https://example.com/bob.png"

    async def test_rejected_token(self, client) -> None:
        response = await client.post("/v1/auth/session", json={"idToken": "forged"})
        assert response.status_code == 401
        assert response.json()["status"] == "error"

    async def test_claims_without_email_are_rejected(self, client, verifier) -> None:
        verifier.claims["anon-token"] = IdentityClaims(uid="uid-anon")
        response = await client.post("/v1/auth/session", json={"idToken": "anon-token"})
        assert response.status_code == 401

    async def test_missing_token_is_invalid_input(self, client) -> None:
        response = await client.post("/v1/auth/session", json={})
        assert response.status_code == 422
        assert "idToken" in response.json()["errors"]


class TestSessionToken:
    """Test suite for the issued RS256 token."""

    async def test_token_has_kid_and_verifies_against_jwks(self, client) -> None:
        response = await client.post("/v1/auth/session", json={"idToken": "alice-token"})
        token = response.json()["access_token"]

        jwks = (await client.get("/.well-known/jwks.json")).json()
        header = jwt.get_unverified_header(token)
        assert header["alg"] == "RS256"
        assert header["kid"] in {k["kid"] for k in jwks["keys"]}

        claims = jwt.decode(token, options={"verify_signature": False})
        assert claims["email"] == "alice@example.com"
        assert claims["sub"] == f"user:{response.json()['user']['id']}"

    async def test_users_me(self, client, alice) -> None:
        response = await client.get("/v1/users/me", headers=alice)
        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"

    async def test_protected_route_requires_token(self, client) -> None:
        assert (await client.get("/v1/decks")).status_code == 401
        bad = {"Authorization": "Bearer not-a-jwt"}
        assert (await client.get("/v1/decks", headers=bad)).status_code == 401
