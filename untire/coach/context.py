"""
Settings resolver: one immutable view of everything a turn's prompt needs.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..stores.base import Stores
from ..stores.records import (
    AISettingsRecord,
    ChatRecord,
    ProfileRecord,
    UserSettingsRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnContext:
    profile: Optional[ProfileRecord]
    effective_fatigue_level: Optional[float]
    user_settings: UserSettingsRecord
    dynamic_profile: str
    ai_settings: AISettingsRecord


def effective_fatigue(
    chat: Optional[ChatRecord],
    profile: Optional[ProfileRecord],
) -> Optional[float]:
    """The chat's anchor wins, then the profile's typical level, else unknown."""
    if chat is not None and chat.initial_fatigue_level is not None:
        return chat.initial_fatigue_level
    if profile is not None and profile.current_fatigue_level is not None:
        return profile.current_fatigue_level
    return None


async def resolve_turn_context(
    stores: Stores,
    user_id: str,
    chat: Optional[ChatRecord] = None,
) -> TurnContext:
    """
    Read profile, settings and dynamic profile for one turn.

    Reads only, apart from lazily creating the user's settings row and the
    global AI settings row the first time they are asked for.
    """
    profile = await stores.profiles.get_profile(user_id)
    user_settings = await stores.settings.get_user_settings(user_id)
    ai_settings = await stores.settings.get_ai_settings()
    dynamic = profile.dynamic_profile if profile else ""

    ctx = TurnContext(
        profile=profile,
        effective_fatigue_level=effective_fatigue(chat, profile),
        user_settings=user_settings,
        dynamic_profile=dynamic,
        ai_settings=ai_settings,
    )
    logger.debug(
        "Context for user=%s: fatigue=%s behavior=%s tools=%s",
        user_id, ctx.effective_fatigue_level,
        user_settings.behavior_type, user_settings.tools_allowed,
    )
    return ctx
