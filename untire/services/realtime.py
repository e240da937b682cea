"""
Realtime notifications. Thin wrapper around core.redis.
"""

from ..core import redis as _redis


# ── Chat events ──────────────────────────────────────────────────────

async def chat_started(user_id: str, chat_id: str, data: dict = None):
    await _redis.notify_chat(user_id, chat_id, "chat.started", data)


async def chat_completed(user_id: str, chat_id: str, data: dict = None):
    await _redis.notify_chat(user_id, chat_id, "chat.completed", data)


# ── Profile events ───────────────────────────────────────────────────

async def profile_updated(user_id: str, data: dict = None):
    await _redis.notify_user(user_id, "profile.updated", data)
