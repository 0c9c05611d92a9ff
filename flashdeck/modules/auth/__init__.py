from flashdeck.core.db.schemas.auth import User
from .users import (
    UserRead,
    UserUpdate,
    UserManager,
    get_user_db,
    get_user_manager,
    get_jwt_strategy,
    auth_backend,
    fastapi_users,
    current_active_user,
)
from .identity import (
    IdentityClaims,
    IdentityVerifier,
    FirebaseIdentityVerifier,
    get_identity_verifier,
)
from .bridge import IdentityBridge

__all__ = [
    "User",
    "UserRead",
    "UserUpdate",
    "UserManager",
    "get_user_db",
    "get_user_manager",
    "get_jwt_strategy",
    "auth_backend",
    "fastapi_users",
    "current_active_user",
    "IdentityClaims",
    "IdentityVerifier",
    "FirebaseIdentityVerifier",
    "get_identity_verifier",
    "IdentityBridge",
]
