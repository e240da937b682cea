"""
Catalog API — videos and breathing exercises the coach can suggest.

GET    /api/videos?category=             — List videos
POST   /api/videos                       — Add a video (admin)
DELETE /api/videos/{video_id}            — Remove a video (admin)
GET    /api/breathing-exercises          — List breathing exercises
POST   /api/breathing-exercises          — Add one (admin)
DELETE /api/breathing-exercises/{id}     — Remove one (admin)
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from ..coach.directives import FIELD_END, TAG_END
from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_stores, get_user, require_admin
from ..stores.base import Stores

logger = logging.getLogger(__name__)

catalog_router = APIRouter(tags=["catalog"])


def _no_separator(value: Optional[str], separator: str) -> Optional[str]:
    # Catalog entries are offered to the model as [VIDEO:...] / [BREATHING:...] tags
    if value and separator in value:
        raise ValueError(f"must not contain '{separator}'")
    return value


class VideoCreate(BaseModel):
    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    embed_url: str = Field(min_length=1)
    category: Optional[str] = None
    tags: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_fits_tag(cls, value):
        return _no_separator(value, FIELD_END)

    @field_validator("embed_url")
    @classmethod
    def _locator_fits_tag(cls, value):
        return _no_separator(value, TAG_END)


class BreathingCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    duration: int = Field(gt=0)
    pattern: str = Field(min_length=1)
    embed_code: Optional[str] = ""

    @field_validator("title", "pattern")
    @classmethod
    def _field_fits_tag(cls, value):
        return _no_separator(value, FIELD_END)

    @field_validator("embed_code")
    @classmethod
    def _embed_fits_tag(cls, value):
        return _no_separator(value, TAG_END)


# ── Videos ───────────────────────────────────────────────────────────

@catalog_router.get("/videos")
async def list_videos(
    category: Optional[str] = None,
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    videos = await stores.catalog.list_videos(category)
    return {"videos": [asdict(v) for v in videos]}


@catalog_router.post("/videos")
async def add_video(
    request: VideoCreate,
    admin: AuthenticatedUser = Depends(require_admin),
    stores: Stores = Depends(get_stores),
):
    video = await stores.catalog.add_video(
        request.title, request.url, request.embed_url, request.category, request.tags,
    )
    logger.info("Admin %s added video %s", admin.username, video.title)
    return {"video": asdict(video)}


@catalog_router.delete("/videos/{video_id}")
async def delete_video(
    video_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    stores: Stores = Depends(get_stores),
):
    if not await stores.catalog.delete_video(video_id):
        raise HTTPException(status_code=404, detail="Video not found")
    return {"success": True}


# ── Breathing exercises ──────────────────────────────────────────────

@catalog_router.get("/breathing-exercises")
async def list_breathing(
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    exercises = await stores.catalog.list_breathing()
    return {"exercises": [asdict(b) for b in exercises]}


@catalog_router.post("/breathing-exercises")
async def add_breathing(
    request: BreathingCreate,
    admin: AuthenticatedUser = Depends(require_admin),
    stores: Stores = Depends(get_stores),
):
    exercise = await stores.catalog.add_breathing(
        request.title, request.description, request.duration,
        request.pattern, request.embed_code,
    )
    logger.info("Admin %s added breathing exercise %s", admin.username, exercise.title)
    return {"exercise": asdict(exercise)}


@catalog_router.delete("/breathing-exercises/{exercise_id}")
async def delete_breathing(
    exercise_id: str,
    admin: AuthenticatedUser = Depends(require_admin),
    stores: Stores = Depends(get_stores),
):
    if not await stores.catalog.delete_breathing(exercise_id):
        raise HTTPException(status_code=404, detail="Breathing exercise not found")
    return {"success": True}
