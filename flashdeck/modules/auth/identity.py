"""Verification of externally issued identity tokens.

``IdentityVerifier`` is the seam the session exchange depends on. The
Firebase implementation owns its own ``firebase_admin.App`` instead of
relying on the SDK's default global app.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Optional, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from flashdeck.core.config import FirebaseSettings, settings
from flashdeck.core.errors import IdentityError
from flashdeck.core.logging import get_logger

logger = get_logger(__name__)

APP_NAME = "flashdeck"


class IdentityClaims(BaseModel):
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    email_verified: bool = False

    @classmethod
    def from_decoded(cls, decoded: dict[str, Any]) -> "IdentityClaims":
        uid = decoded.get("uid") or decoded.get("sub")
        if not uid:
            raise IdentityError("Invalid token or UID missing.")
        return cls(
            uid=uid,
            email=decoded.get("email"),
            name=decoded.get("name"),
            picture=decoded.get("picture"),
            email_verified=bool(decoded.get("email_verified", False)),
        )


class IdentityVerifier(Protocol):
    async def verify(self, id_token: str) -> IdentityClaims: ...


def _load_service_account(encoded: str) -> dict[str, Any]:
    try:
        return json.loads(base64.b64decode(encoded).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise IdentityError(f"Invalid Firebase service account: {e}") from e


class FirebaseIdentityVerifier:
    def __init__(self, app: firebase_admin.App, *, check_revoked: bool = False) -> None:
        self.app = app
        self.check_revoked = check_revoked

    @classmethod
    def from_settings(cls, cfg: Optional[FirebaseSettings] = None) -> "FirebaseIdentityVerifier":
        cfg = cfg or settings.firebase
        try:
            app = firebase_admin.get_app(APP_NAME)
        except ValueError:
            if not cfg.service_account_b64:
                raise IdentityError("FIREBASE_ADMIN_SDK_JSON_BASE64 is not set.")
            logger.info("Initializing Firebase Admin SDK")
            cred = credentials.Certificate(_load_service_account(cfg.service_account_b64))
            options = {"projectId": cfg.project_id} if cfg.project_id else None
            app = firebase_admin.initialize_app(cred, options, name=APP_NAME)
        return cls(app, check_revoked=cfg.check_revoked)

    async def verify(self, id_token: str) -> IdentityClaims:
        if not id_token:
            raise IdentityError("No ID token provided.")
        try:
            # verify_id_token may fetch Google certificates; keep it off the loop
            decoded = await run_in_threadpool(
                firebase_auth.verify_id_token,
                id_token,
                app=self.app,
                check_revoked=self.check_revoked,
            )
        except (
            ValueError,
            firebase_auth.InvalidIdTokenError,
            firebase_auth.UserDisabledError,
            firebase_auth.CertificateFetchError,
        ) as e:
            logger.warning(f"Identity token rejected: {e}")
            raise IdentityError("Identity token verification failed.") from e
        return IdentityClaims.from_decoded(decoded)


_verifier: Optional[FirebaseIdentityVerifier] = None


def get_identity_verifier() -> IdentityVerifier:
    """FastAPI dependency; built lazily so the app starts without credentials."""
    global _verifier
    if _verifier is None:
        _verifier = FirebaseIdentityVerifier.from_settings()
    return _verifier
