"""Bearer-token authentication for student requests.

Tokens are HS256 JWTs issued by the platform's auth service; the ``sub``
claim carries the student's UUID. Local development can set
``DEV_USER_ID`` so that requests without a token act as one fixed student.
"""
import logging
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from degree_planner.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    id: UUID


bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def user_id_from_token(token: str, settings: Settings) -> UUID:
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub"]},
        )
    except jwt.PyJWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise _unauthorized("Could not validate credentials") from exc

    try:
        return UUID(str(claims["sub"]))
    except ValueError as exc:
        raise _unauthorized("Invalid user id in token") from exc


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    if credentials is not None:
        return CurrentUser(id=user_id_from_token(credentials.credentials, settings))

    if settings.DEV_USER_ID is not None:
        logger.debug("No bearer token; acting as development user %s", settings.DEV_USER_ID)
        return CurrentUser(id=settings.DEV_USER_ID)

    raise _unauthorized("Not authenticated")
