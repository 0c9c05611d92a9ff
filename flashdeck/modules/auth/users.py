"""fastapi-users wiring.

Accounts are created by the identity exchange, never by password
registration, so only the read/update schemas and the bearer backend are
exposed here.
"""

from functools import lru_cache
from typing import AsyncIterator, Optional, cast

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers
from fastapi_users import schemas as fa_schemas
from fastapi_users.authentication import AuthenticationBackend, BearerTransport
from fastapi_users.authentication.transport import Transport
from fastapi_users.manager import BaseUserManager, IntegerIDMixin
from fastapi_users_db_sqlalchemy import SQLAlchemyUserDatabase
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from flashdeck.core.config import settings
from flashdeck.core.db.base import get_session
from flashdeck.core.db.schemas.auth import User
from flashdeck.core.jwt_strategy import SessionTokenStrategy
from flashdeck.core.logging import get_logger

logger = get_logger(__name__)


class UserRead(fa_schemas.BaseUser[int]):
    email: EmailStr
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class UserUpdate(fa_schemas.BaseUserUpdate):
    name: Optional[str] = None


async def get_user_db(
    session: AsyncSession = Depends(get_session),
) -> AsyncIterator[SQLAlchemyUserDatabase]:
    yield SQLAlchemyUserDatabase(session, User)


class UserManager(IntegerIDMixin, BaseUserManager[User, int]):  # type: ignore[type-arg]
    reset_password_token_secret = settings.app.jwt_secret
    verification_token_secret = settings.app.jwt_secret

    async def on_after_update(
        self, user: User, update_dict: dict, request: Optional[Request] = None
    ) -> None:
        logger.info(
            f"Profile updated: {sorted(update_dict)}", extra={"user_id": user.id}
        )


async def get_user_manager(
    user_db: SQLAlchemyUserDatabase = Depends(get_user_db),
) -> AsyncIterator[UserManager]:
    yield UserManager(user_db)


# Tokens are only minted by the identity exchange endpoint
bearer_transport = BearerTransport(tokenUrl=f"{settings.app.version}/auth/session")


@lru_cache(maxsize=1)
def get_jwt_strategy() -> SessionTokenStrategy:
    return SessionTokenStrategy.from_settings()


auth_backend = AuthenticationBackend(
    name="jwt",
    transport=cast(Transport, bearer_transport),
    get_strategy=get_jwt_strategy,
)

fastapi_users = FastAPIUsers[User, int](  # type: ignore[type-arg]
    get_user_manager,
    [auth_backend],
)

current_active_user = fastapi_users.current_user(active=True)
