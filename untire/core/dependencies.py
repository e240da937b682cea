"""
FastAPI dependencies. Injected into route handlers.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import AuthenticatedUser, get_current_user
from .config import get_settings
from .database import get_db as _get_db
from ..coach.profile_updater import DynamicProfileUpdater, get_profile_updater
from ..stores.base import Stores
from ..stores.sql import sql_stores


async def get_db() -> AsyncSession:
    """Yields an async DB session per request."""
    async for session in _get_db():
        yield session


def session_token(request: Request, authorization: Optional[str] = None) -> str:
    """Session cookie first, then a Bearer header."""
    token = request.cookies.get(get_settings().session_cookie_name)
    if token:
        return token
    scheme, _, value = (authorization or "").partition(" ")
    if scheme.lower() == "bearer" and value:
        return value
    return ""


async def get_user(
    request: Request,
    authorization: str = Header(default=""),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """
    Resolve authenticated user from the session cookie or Authorization header.
    Returns dev user if FF_USE_SESSION_AUTH=false.
    """
    try:
        return await get_current_user(db, session_token(request, authorization))
    except PermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_admin(
    user: AuthenticatedUser = Depends(get_user),
) -> AuthenticatedUser:
    """Same as get_user, but only for admins."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def get_stores(db: AsyncSession = Depends(get_db)) -> Stores:
    """The SQL stores over this request's session."""
    return sql_stores(db)


def get_updater() -> DynamicProfileUpdater:
    return get_profile_updater()
