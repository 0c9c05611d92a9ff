"""Exchange of a third-party identity token for a first-party session token."""

from __future__ import annotations

from fastapi_users.authentication import Strategy
from fastapi_users.password import PasswordHelper
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from flashdeck.core.db.schemas.auth import User
from flashdeck.core.errors import IdentityError, UpstreamError
from flashdeck.core.logging import get_logger
from flashdeck.modules.auth.identity import IdentityClaims, IdentityVerifier

logger = get_logger(__name__)


class IdentityBridge:
    """Verifies identity tokens and maps them onto local users and JWTs."""

    def __init__(
        self,
        session: AsyncSession,
        verifier: IdentityVerifier,
        strategy: Strategy,
        password_helper: PasswordHelper | None = None,
    ) -> None:
        self.session = session
        self.verifier = verifier
        self.strategy = strategy
        self.password_helper = password_helper or PasswordHelper()

    async def exchange(self, id_token: str) -> tuple[User, str]:
        claims = await self.verifier.verify(id_token)
        user = await self.sync_user(claims)
        token = await self.strategy.write_token(user)
        logger.info("Issued session token", extra={"user_id": user.id})
        return user, token

    async def sync_user(self, claims: IdentityClaims) -> User:
        """Create the local user on first login, refresh profile fields afterwards."""
        if not claims.email:
            raise IdentityError("Identity token carries no email address.")

        try:
            result = await self.session.execute(
                select(User).where(User.firebase_uid == claims.uid)
            )
            user = result.scalar_one_or_none()

            if user is None:
                logger.info(f"Creating new user for uid {claims.uid}")
                user = User(
                    firebase_uid=claims.uid,
                    email=claims.email,
                    name=claims.name,
                    avatar_url=claims.picture,
                    # Password login is not offered; store an unusable random hash
                    hashed_password=self.password_helper.hash(
                        self.password_helper.generate()
                    ),
                    is_active=True,
                    is_verified=claims.email_verified,
                )
                self.session.add(user)
            elif (
                user.email != claims.email
                or user.name != claims.name
                or user.avatar_url != claims.picture
                or user.is_verified != claims.email_verified
            ):
                logger.info("Updating user info", extra={"user_id": user.id})
                user.email = claims.email
                user.name = claims.name
                user.avatar_url = claims.picture
                user.is_verified = claims.email_verified

            await self.session.commit()
            await self.session.refresh(user)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to find/create user: {e}")
            raise UpstreamError("Database error while signing in.") from e
        return user
