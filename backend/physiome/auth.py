"""
Auth gate: JWT verification, caller resolution and role checks.

Tokens are read from the `token` cookie first, then from an
`Authorization: Bearer <token>` header. Every failure (no token, bad
signature, expired, unknown user) is reported as the same 401 so clients
cannot tell them apart.
"""

import logging
import time
from typing import Optional

from fastapi import Depends, Request
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from physiome.config import get_settings
from physiome.database import get_db
from physiome.exceptions import Forbidden, Unauthenticated
from physiome.models.user import ROLES, User
from physiome.schemas.user import UserResponse

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_EXPIRE_SECONDS = 86400  # 24 hours
TOKEN_COOKIE = "token"


def create_token(user_id: str, expires_in: int = TOKEN_EXPIRE_SECONDS) -> str:
    """Sign a token for the given user id. Issuance proper lives in the auth service."""
    settings = get_settings()
    payload = {"id": user_id, "exp": int(time.time()) + expires_in}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[str]:
    """Return the user id carried by a valid token, None if invalid/expired."""
    try:
        settings = get_settings()
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.info("Token verification failed: %s", e)
        return None
    user_id = payload.get("id") or payload.get("sub")
    return str(user_id) if user_id else None


def extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """FastAPI dependency. Resolves the caller or raises Unauthenticated."""
    token = extract_token(request)
    if not token:
        logger.info("No token found in request to %s", request.url.path)
        raise Unauthenticated()

    user_id = decode_token(token)
    if not user_id:
        raise Unauthenticated()

    user = await db.get(User, user_id)
    if user is None:
        logger.info("Token references unknown user %s", user_id)
        raise Unauthenticated()

    request.state.user = UserResponse.model_validate(user)
    return user


def require_roles(*roles: str):
    """Dependency factory admitting only callers whose role is in `roles`."""
    allowed = frozenset(r for r in roles if r in ROLES)

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in ROLES or user.role not in allowed:
            logger.warning("User %s with role %s denied", user.id, user.role)
            raise Forbidden(f"Access denied. {user.role} is not authorized to access this route")
        return user

    return checker


require_admin = require_roles("admin")
