# talkitout/auth.py
"""
Bearer-token verification and role gates.

Tokens are issued elsewhere (the school identity service); we only check the
signature, expiry and token type, then load the account they name.
"""
from __future__ import annotations

import logging
from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .config import Settings
from .constants import UserRole
from .db import get_db
from .errors import AppError
from .models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def decode_access_token(token: str, settings: Settings) -> int:
    """Return the user id carried by a valid access token, or raise AppError(401)."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise AppError(401, "Invalid or expired token")

    if payload.get("type", "access") != "access":
        raise AppError(401, "Invalid token type")
    sub = payload.get("sub") or payload.get("userId")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise AppError(401, "Invalid token")


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AppError(401, "No token provided")

    user_id = decode_access_token(credentials.credentials, settings)
    user = db.get(User, user_id)
    if user is None:
        raise AppError(401, "Invalid token")

    # read by the per-user rate limiter key
    request.state.user_id = user.id
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    allowed = set(roles)

    def _dep(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise AppError(403, "Insufficient permissions")
        return user

    return _dep


require_staff = require_roles(UserRole.COUNSELOR, UserRole.ADMIN)
