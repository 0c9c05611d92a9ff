from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from flashdeck.apis.deps import Bridge
from flashdeck.core.config import settings
from flashdeck.modules.auth import (
    fastapi_users,
    get_jwt_strategy,
    UserRead,
    UserUpdate,
)


router = APIRouter()


class SessionRequest(BaseModel):
    id_token: str = Field(..., min_length=1, alias="idToken")

    model_config = {"populate_by_name": True}


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


@router.post(
    f"/{settings.app.version}/auth/session",
    response_model=SessionResponse,
    tags=["auth"],
)
async def create_session(request: SessionRequest, bridge: Bridge) -> SessionResponse:
    """Exchange an identity-provider ID token for an RS256 session token"""
    user, token = await bridge.exchange(request.id_token)
    return SessionResponse(access_token=token, user=UserRead.model_validate(user))


@router.get("/.well-known/jwks.json", tags=["auth"])
async def jwks():
    """JWKS endpoint for public key distribution"""
    return JSONResponse(content=get_jwt_strategy().get_jwks())


router.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix=f"/{settings.app.version}/users",
    tags=["users"],
)
