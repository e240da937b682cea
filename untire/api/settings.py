"""
User settings API.

GET  /api/settings — Behavior settings (created with defaults on first read)
POST /api/settings — Update; omitted fields unchanged
"""

from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_stores, get_user
from ..stores.base import Stores

settings_router = APIRouter(tags=["settings"])


class UserSettingsUpdate(BaseModel):
    behavior_type: Optional[Literal["empathetic", "practical", "encouraging"]] = None
    agentic_features: Optional[bool] = None
    chat_only: Optional[bool] = None


@settings_router.get("/settings")
async def get_settings(
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    settings = await stores.settings.get_user_settings(user.user_id)
    return {"settings": asdict(settings)}


@settings_router.post("/settings")
async def update_settings(
    request: UserSettingsUpdate,
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    settings = await stores.settings.update_user_settings(
        user.user_id, request.model_dump(exclude_none=True),
    )
    return {"settings": asdict(settings)}
