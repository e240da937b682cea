"""
Admin API. Every route requires an admin session.

GET    /api/admin/ai-settings     — Global AI settings
POST   /api/admin/ai-settings     — Update them
GET    /api/admin/users           — List accounts
POST   /api/admin/users           — Create an account
DELETE /api/admin/users/{user_id} — Delete an account and its data (not yourself)
GET    /api/admin/stats           — Counts and provider status
"""

import logging
from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser, create_user
from ..core.dependencies import get_db, get_stores, require_admin
from ..models.catalog import Video
from ..models.conversation import Chat, Message
from ..models.user import User
from ..services import llm
from ..stores.base import Stores
from ..stores.records import PROFILE_FIELD_NAMES
from ..stores.sql import delete_user_data

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin", tags=["admin"])

ToolKind = Literal["videos", "breathing", "journaling", "activity_tracking", "mood_tracking"]
ProfileField = Literal[PROFILE_FIELD_NAMES]


class AISettingsUpdate(BaseModel):
    model: Optional[str] = Field(default=None, min_length=1)
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, gt=0, le=4096)
    # Empty string clears the custom prompt
    system_prompt: Optional[str] = None
    enabled_tools: Optional[list[ToolKind]] = None
    verbosity: Optional[Literal["low", "medium", "high"]] = None
    memory_enabled: Optional[bool] = None
    accessible_user_fields: Optional[list[ProfileField]] = None


class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=6)
    is_admin: bool = False


class UserOut(BaseModel):
    id: str
    username: str
    is_admin: bool
    created_at: str


# ── AI settings ──────────────────────────────────────────────────────

@admin_router.get("/ai-settings")
async def get_ai_settings(
    admin: AuthenticatedUser = Depends(require_admin),
    stores: Stores = Depends(get_stores),
):
    settings = await stores.settings.get_ai_settings()
    return {"settings": asdict(settings)}


@admin_router.post("/ai-settings")
async def update_ai_settings(
    request: AISettingsUpdate,
    admin: AuthenticatedUser = Depends(require_admin),
    stores: Stores = Depends(get_stores),
):
    fields = request.model_dump(exclude_none=True)
    if "system_prompt" in fields and not fields["system_prompt"].strip():
        fields["system_prompt"] = None
    settings = await stores.settings.update_ai_settings(fields)
    logger.info("Admin %s updated AI settings: %s", admin.username, sorted(fields))
    return {"settings": asdict(settings)}


# ── Users ────────────────────────────────────────────────────────────

@admin_router.get("/users", response_model=list[UserOut])
async def list_users(
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).order_by(User.created_at.asc()))
    return [
        UserOut(
            id=u.id,
            username=u.username,
            is_admin=bool(u.is_admin),
            created_at=u.created_at.isoformat() if u.created_at else "",
        )
        for u in result.scalars().all()
    ]


@admin_router.post("/users", response_model=UserOut)
async def add_user(
    request: UserCreate,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).where(User.username == request.username))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Username already exists")

    user = await create_user(db, request.username, request.password, is_admin=request.is_admin)
    await db.refresh(user)
    return UserOut(
        id=user.id,
        username=user.username,
        is_admin=bool(user.is_admin),
        created_at=user.created_at.isoformat() if user.created_at else "",
    )


@admin_router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if user_id == admin.user_id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    await delete_user_data(db, user_id)
    await db.delete(user)
    logger.info("Admin %s deleted user %s", admin.username, user.username)
    return {"success": True}


# ── Stats ────────────────────────────────────────────────────────────

async def _count(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@admin_router.get("/stats")
async def stats(
    admin: AuthenticatedUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return {
        "users": await _count(db, User),
        "chats": await _count(db, Chat),
        "messages": await _count(db, Message),
        "videos": await _count(db, Video),
        "llm_configured": llm.is_configured(),
    }
