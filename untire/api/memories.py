"""
Saved memories API — cards the user keeps on purpose.

GET    /api/memories              — List
POST   /api/memories              — Add
PUT    /api/memories/{memory_id}  — Edit
DELETE /api/memories/{memory_id}  — Remove
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_db, get_user
from ..models.memory import SavedMemory

logger = logging.getLogger(__name__)

memories_router = APIRouter(prefix="/memories", tags=["memories"])


class MemoryIn(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: Optional[str] = None


class MemoryOut(BaseModel):
    id: str
    title: str
    content: str
    category: Optional[str] = None
    created_at: str


def _out(m: SavedMemory) -> MemoryOut:
    return MemoryOut(
        id=m.id,
        title=m.title,
        content=m.content,
        category=m.category,
        created_at=m.created_at.isoformat() if m.created_at else "",
    )


async def _owned(db: AsyncSession, memory_id: str, user: AuthenticatedUser) -> SavedMemory:
    memory = await db.get(SavedMemory, memory_id)
    if memory is None or memory.user_id != user.user_id:
        raise HTTPException(status_code=404, detail="Memory not found")
    return memory


@memories_router.get("", response_model=list[MemoryOut])
async def list_memories(
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(SavedMemory)
        .where(SavedMemory.user_id == user.user_id)
        .order_by(SavedMemory.created_at.desc())
    )
    return [_out(m) for m in result.scalars().all()]


@memories_router.post("", response_model=MemoryOut)
async def add_memory(
    request: MemoryIn,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    memory = SavedMemory(user_id=user.user_id, **request.model_dump())
    db.add(memory)
    await db.flush()
    await db.refresh(memory)
    return _out(memory)


@memories_router.put("/{memory_id}", response_model=MemoryOut)
async def update_memory(
    memory_id: str,
    request: MemoryIn,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    memory = await _owned(db, memory_id, user)
    memory.title = request.title
    memory.content = request.content
    memory.category = request.category
    await db.flush()
    await db.refresh(memory)
    return _out(memory)


@memories_router.delete("/{memory_id}")
async def delete_memory(
    memory_id: str,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    memory = await _owned(db, memory_id, user)
    await db.delete(memory)
    return {"success": True}
