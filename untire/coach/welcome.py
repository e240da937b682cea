"""
Personalized opening message for a new chat.
"""

import asyncio
import dataclasses
import logging
from typing import Optional

from ..core.config import get_settings
from ..services import llm
from ..stores.base import Stores
from .context import resolve_turn_context
from .prompt import compose_system_prompt, format_level

logger = logging.getLogger(__name__)

DEFAULT_WELCOME = (
    "Hello! I'm Untire Coach. I'm here to support you through cancer-related fatigue "
    "with gentle, practical strategies. What brings you here today?"
)
WELCOME_MAX_TOKENS = 300


def build_welcome_request(name: Optional[str], fatigue: Optional[float], dynamic_profile: str) -> str:
    parts = ["Create a warm, personalized welcome message for this user. "]
    if name:
        parts.append(f"Address them by name: {name}. ")
    if fatigue is not None:
        parts.append(f"Their current fatigue level is {format_level(fatigue)}/10. ")
    if dynamic_profile:
        parts.append(
            f"\n\nHere's what I know about them:\n{dynamic_profile}\n\n"
            "Reference specific details from this profile to show you remember them. "
            "Be proactive and suggest topics or ask about things relevant to their life. "
        )
    else:
        parts.append("This is a new user or we don't have much information yet. ")
    parts.append(
        "\n\nBe proactive: Don't just ask \"what brings you here?\" - suggest specific topics "
        "or ask about their day, energy levels, sleep, or how they're feeling. Make it "
        "personal and engaging. Keep it conversational (100-150 words)."
    )
    return "".join(parts)


async def welcome_message(
    stores: Stores,
    user_id: str,
    fatigue_level: Optional[float] = None,
) -> str:
    """Model-written greeting, or the fixed one when the model is unavailable."""
    if not llm.is_configured():
        return DEFAULT_WELCOME

    ctx = await resolve_turn_context(stores, user_id)
    fatigue = fatigue_level if fatigue_level is not None else ctx.effective_fatigue_level
    ctx = dataclasses.replace(ctx, effective_fatigue_level=fatigue)
    system_prompt = compose_system_prompt(ctx)
    request = build_welcome_request(
        ctx.profile.name if ctx.profile else None, fatigue, ctx.dynamic_profile,
    )

    try:
        text = await asyncio.wait_for(
            llm.complete(
                system_prompt,
                [{"role": "user", "content": request}],
                model=ctx.ai_settings.model,
                temperature=ctx.ai_settings.temperature,
                max_tokens=WELCOME_MAX_TOKENS,
            ),
            timeout=get_settings().llm_timeout_seconds,
        )
    except Exception as e:
        logger.error("Welcome message generation failed: %s", e)
        return DEFAULT_WELCOME

    return text.strip() or DEFAULT_WELCOME
