"""
Chat API — one coaching turn per request.

POST /api/chat            — Send a message, get the coach's reply
POST /api/welcome-message — Personalized greeting for a new chat
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..coach.profile_updater import DynamicProfileUpdater
from ..coach.turn import ChatAccessError, handle_turn
from ..coach.welcome import welcome_message
from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_stores, get_updater, get_user
from ..core.guardrails import check_input
from ..stores.base import Stores

logger = logging.getLogger(__name__)

chat_router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    chat_id: Optional[str] = Field(default=None, alias="chatId")
    initial_fatigue_level: Optional[float] = Field(
        default=None, alias="initialFatigueLevel", ge=0, le=10,
    )


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chat_id: str = Field(serialization_alias="chatId")
    response: str
    videos: Optional[list[dict]] = None
    breathing: Optional[list[dict]] = None


class WelcomeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_fatigue_level: Optional[float] = Field(
        default=None, alias="currentFatigueLevel", ge=0, le=10,
    )


@chat_router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def chat(
    request: ChatRequest,
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
    updater: DynamicProfileUpdater = Depends(get_updater),
):
    """Send a message to the coach."""
    check = check_input(request.message, user.user_id)
    if not check.allowed:
        raise HTTPException(status_code=400, detail=check.reason)

    try:
        result = await handle_turn(
            stores,
            user_id=user.user_id,
            message=request.message,
            chat_id=request.chat_id,
            initial_fatigue_level=request.initial_fatigue_level,
            updater=updater,
        )
    except ChatAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))

    return ChatResponse(
        chat_id=result.chat_id,
        response=result.response,
        videos=result.videos or None,
        breathing=result.breathing or None,
    )


@chat_router.post("/welcome-message")
async def welcome(
    request: WelcomeRequest,
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    message = await welcome_message(stores, user.user_id, request.current_fatigue_level)
    return {"message": message}
