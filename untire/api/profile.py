"""
Profile API (current user).

GET    /api/profile                     — Static profile (null if none yet)
POST   /api/profile                     — Partial update; omitted/null fields unchanged
GET    /api/profile/should-ask-fatigue  — Whether to show the fatigue check-in
POST   /api/profile/fatigue-asked       — Stamp today's check-in
POST   /api/profile/fatigue             — Set the typical fatigue level
DELETE /api/user/data                   — Delete everything stored for the user
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_db, get_stores, get_user
from ..services.fatigue_quiz import should_ask_fatigue
from ..stores.base import Stores
from ..stores.records import ProfileRecord
from ..stores.sql import delete_user_data

logger = logging.getLogger(__name__)

profile_router = APIRouter(tags=["profile"])


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=130)
    gender: Optional[str] = None
    ethnicity: Optional[str] = None
    cancer_type: Optional[str] = None
    treatment_stage: Optional[str] = None
    diagnosis_date: Optional[str] = None
    current_fatigue_level: Optional[float] = Field(default=None, ge=0, le=10)
    location: Optional[str] = None
    support_system: Optional[str] = None


class FatigueUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fatigue_level: float = Field(alias="fatigueLevel", ge=0, le=10)


def _profile_out(profile: Optional[ProfileRecord]) -> Optional[dict]:
    if profile is None:
        return None
    out = asdict(profile)
    if profile.last_fatigue_asked_date:
        out["last_fatigue_asked_date"] = profile.last_fatigue_asked_date.isoformat()
    return out


@profile_router.get("/profile")
async def get_profile(
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    profile = await stores.profiles.get_profile(user.user_id)
    return {"profile": _profile_out(profile)}


@profile_router.post("/profile")
async def update_profile(
    request: ProfileUpdate,
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    profile = await stores.profiles.upsert_profile(
        user.user_id, request.model_dump(exclude_none=True),
    )
    return {"profile": _profile_out(profile)}


@profile_router.get("/profile/should-ask-fatigue")
async def get_should_ask_fatigue(
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    profile = await stores.profiles.get_profile(user.user_id)
    return should_ask_fatigue(profile, date.today())


@profile_router.post("/profile/fatigue-asked")
async def mark_fatigue_asked(
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    await stores.profiles.mark_fatigue_asked(user.user_id, date.today())
    return {"success": True}


@profile_router.post("/profile/fatigue")
async def update_fatigue(
    request: FatigueUpdate,
    user: AuthenticatedUser = Depends(get_user),
    stores: Stores = Depends(get_stores),
):
    profile = await stores.profiles.upsert_profile(
        user.user_id, {"current_fatigue_level": request.fatigue_level},
    )
    return {"profile": _profile_out(profile)}


@profile_router.delete("/user/data")
async def delete_my_data(
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_user_data(db, user.user_id)
    return {"success": True}
