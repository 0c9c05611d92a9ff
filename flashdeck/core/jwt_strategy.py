"""RS256 session tokens for fastapi-users.

Tokens are signed with a local RSA key that is created on first start and
published at ``/.well-known/jwks.json`` under ``JWT_KEY_ID``.
"""

import json
import time
from pathlib import Path
from typing import Any, Dict, Optional

import jwt
from jwcrypto import jwk
from fastapi_users import exceptions, models
from fastapi_users.authentication.strategy.jwt import JWTStrategy

from flashdeck.core.config import settings
from flashdeck.core.logging import get_logger

logger = get_logger(__name__)

ALGORITHM = "RS256"


def load_or_create_key(path: Path) -> jwk.JWK:
    if path.exists():
        return jwk.JWK.from_pem(path.read_bytes())

    logger.info("Generating RSA signing key at %s", path)
    key = jwk.JWK.generate(kty="RSA", size=2048)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(key.export_to_pem(private_key=True, password=None))
    return key


class SessionTokenStrategy(JWTStrategy[models.UP, models.ID]):
    """JWTStrategy variant that signs with RS256 and stamps a ``kid`` header."""

    def __init__(
        self,
        lifetime_seconds: Optional[int],
        key_id: str = "v1",
        key_file: Optional[str] = None,
        issuer: Optional[str] = None,
    ):
        self.key_id = key_id
        self.issuer = issuer or settings.jwt.issuer
        self.rsa_key = load_or_create_key(Path(key_file or settings.jwt.key_file))

        super().__init__(
            secret=self.rsa_key.export_to_pem(private_key=True, password=None),
            lifetime_seconds=lifetime_seconds,
            token_audience=[settings.jwt.application_id],
            algorithm=ALGORITHM,
            public_key=self.rsa_key.export_to_pem(private_key=False, password=None),
        )

    @classmethod
    def from_settings(cls) -> "SessionTokenStrategy":
        return cls(
            lifetime_seconds=settings.jwt.token_lifetime_seconds,
            key_id=settings.jwt.key_id,
        )

    def claims_for(self, user: models.UP) -> Dict[str, Any]:
        now = int(time.time())
        claims: Dict[str, Any] = {
            "user_id": str(user.id),
            "sub": f"user:{user.id}",
            "aud": self.token_audience,
            "iss": self.issuer,
            "iat": now,
        }
        if self.lifetime_seconds:
            claims["exp"] = now + self.lifetime_seconds
        # Profile claims let other services greet the user without a lookup
        for field in ("email", "name"):
            value = getattr(user, field, None)
            if value:
                claims[field] = str(value)
        return claims

    async def write_token(self, user: models.UP) -> str:
        return jwt.encode(
            self.claims_for(user),
            self.encode_key,
            algorithm=self.algorithm,
            headers={"kid": self.key_id},
        )

    async def read_token(
        self, token: Optional[str], user_manager
    ) -> Optional[models.UP]:
        """Resolve the user for a token; any invalid token yields None"""
        if token is None:
            return None

        try:
            payload = jwt.decode(
                token,
                self.decode_key,
                algorithms=[self.algorithm],
                audience=self.token_audience,
                issuer=self.issuer,
            )
            return await user_manager.get(user_manager.parse_id(payload["user_id"]))
        except (jwt.PyJWTError, KeyError):
            return None
        except (exceptions.InvalidID, exceptions.UserNotExists):
            return None

    def get_jwks(self) -> Dict[str, Any]:
        public = json.loads(self.rsa_key.export_public())
        public.update({"kid": self.key_id, "alg": ALGORITHM, "use": "sig"})
        return {"keys": [public]}
