"""
Chats API.

GET    /api/chats          — Current user's 10 most recent chats
GET    /api/chat/{chat_id} — Chat with its messages
DELETE /api/chat/{chat_id} — Delete a chat and its messages
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_stores, get_user
from ..stores.base import Stores
from ..stores.records import ChatRecord

logger = logging.getLogger(__name__)

chats_router = APIRouter(tags=["chats"])

RECENT_CHATS = 10


class ChatSummary(BaseModel):
    id: str
    title: Optional[str] = None
    initial_fatigue_level: Optional[float] = None
    created_at: str
    updated_at: str


class MessageOut(BaseModel):
    id: str
    role: str
    content: str
    sequence_number: int
    videos: Optional[list[dict]] = None
    breathing: Optional[list[dict]] = None
    created_at: str


class ChatDetail(BaseModel):
    chat: ChatSummary
    messages: list[MessageOut] = []


def _summary(chat: ChatRecord) -> ChatSummary:
    return ChatSummary(
        id=chat.id,
        title=chat.title,
        initial_fatigue_level=chat.initial_fatigue_level,
        created_at=chat.created_at.isoformat() if chat.created_at else "",
        updated_at=chat.updated_at.isoformat() if chat.updated_at else "",
    )


async def _owned_chat(stores: Stores, chat_id: str, user: AuthenticatedUser) -> ChatRecord:
    chat = await stores.chats.get_chat(chat_id)
    if chat is None:
        raise HTTPException(status_code=404, detail="Chat not found")
    if chat.user_id != user.user_id:
        raise HTTPException(status_code=403, detail="Forbidden: Cannot access other user chats")
    return chat


@chats_router.get("/chats", response_model=list[ChatSummary])
async def list_chats(
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    chats = await stores.chats.list_chats(user.user_id, limit=RECENT_CHATS)
    return [_summary(c) for c in chats]


@chats_router.get("/chat/{chat_id}", response_model=ChatDetail)
async def get_chat(
    chat_id: str,
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    chat = await _owned_chat(stores, chat_id, user)
    messages = await stores.chats.list_messages(chat.id)

    return ChatDetail(
        chat=_summary(chat),
        messages=[
            MessageOut(
                id=m.id,
                role=m.role,
                content=m.content,
                sequence_number=m.sequence_number,
                videos=(m.media or {}).get("videos"),
                breathing=(m.media or {}).get("breathing"),
                created_at=m.created_at.isoformat() if m.created_at else "",
            )
            for m in messages
        ],
    )


@chats_router.delete("/chat/{chat_id}")
async def delete_chat(
    chat_id: str,
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    chat = await _owned_chat(stores, chat_id, user)
    await stores.chats.delete_chat(chat.id)
    logger.info("Deleted chat %s for user %s", chat.id, user.user_id)
    return {"success": True}
