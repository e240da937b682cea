"""
Auth API.

POST /api/auth/login  — Username + password → session cookie (and token)
POST /api/auth/logout — End the current session
GET  /api/auth/me     — Who am I
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser, authenticate, create_session, end_session
from ..core.config import get_settings
from ..core.dependencies import get_db, get_user, session_token

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    id: str
    username: str
    is_admin: bool = False


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: UserOut


@auth_router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    if not request.username or not request.password:
        raise HTTPException(status_code=400, detail="Username and password required")

    user = await authenticate(db, request.username, request.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    token, expires_at = await create_session(db, user)
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.env == "production",
        max_age=settings.session_ttl_days * 24 * 3600,
    )
    return LoginResponse(
        token=token,
        user=UserOut(id=user.id, username=user.username, is_admin=bool(user.is_admin)),
    )


@auth_router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    authorization: str = Header(default=""),
    db: AsyncSession = Depends(get_db),
):
    token = session_token(request, authorization)
    if token:
        await end_session(db, token)
    response.delete_cookie(get_settings().session_cookie_name)
    return {"success": True}


@auth_router.get("/me", response_model=UserOut)
async def me(user: AuthenticatedUser = Depends(get_user)):
    return UserOut(id=user.user_id, username=user.username, is_admin=user.is_admin)
