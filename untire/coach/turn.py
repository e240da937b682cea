"""
One coaching turn, end to end.

Receive message → save → resolve context → catalogs → compose prompt →
model call → parse directives → save reply → maybe queue profile update.

Everything but the profile update happens before the caller gets a result.
Storage errors propagate; model errors become the fallback reply.
Writes are committed before the model call and again once the reply is
saved, so no transaction is held open while the provider answers.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from ..core.config import get_settings
from ..core.guardrails import check_output
from ..services import llm, realtime
from ..stores.base import Stores
from ..stores.records import ChatRecord, MessageRecord
from .catalogs import provide_tool_catalogs
from .context import TurnContext, resolve_turn_context
from .directives import ParsedReply, media_payload, parse_reply
from .profile_updater import (
    HISTORY_LIMIT,
    DynamicProfileUpdater,
    ProfileUpdateJob,
    should_update_profile,
)
from .prompt import compose_system_prompt

logger = logging.getLogger(__name__)

NEW_CHAT_TITLE = "New Chat"
TITLE_LENGTH = 50
CONTEXT_MESSAGES = 10

# Sent by the frontend to create a chat before the first real message
INIT_MESSAGE = "__INIT__"

FALLBACK_REPLY = (
    "Thank you for reaching out and sharing with me. I can sense that you're looking for "
    "support with cancer-related fatigue, and I want you to know that what you're "
    "experiencing is completely valid.\n\n"
    "I'm currently running in demo mode, but I'm still here to listen and have a real "
    "conversation with you. Cancer-related fatigue isn't just being tired - it can feel "
    "like it touches every part of your day, can't it?\n\n"
    "I'd love to understand more about what you're going through. What does a typical day "
    "look like for you right now? Are there particular times when the fatigue feels "
    "heavier?\n\n"
    "*This is educational support to complement your healthcare team's care.*"
)


class ChatAccessError(PermissionError):
    """The chat exists but belongs to another user."""


@dataclass
class TurnResult:
    chat_id: str
    response: str
    videos: list[dict] = field(default_factory=list)
    breathing: list[dict] = field(default_factory=list)
    used_fallback: bool = False
    profile_update_queued: bool = False


def _as_turn(message: MessageRecord) -> dict:
    return {
        "role": "user" if message.role == "user" else "assistant",
        "content": message.content,
    }


def chat_title(message: str) -> str:
    if len(message) > TITLE_LENGTH:
        return message[:TITLE_LENGTH] + "..."
    return message


async def get_or_create_chat(
    stores: Stores,
    user_id: str,
    chat_id: Optional[str],
    initial_fatigue_level: Optional[float] = None,
) -> ChatRecord:
    """
    Look the chat up, or create it with the given id and fatigue anchor.
    An existing chat keeps its anchor whatever the caller sends.
    """
    chat = await stores.chats.get_chat(chat_id) if chat_id else None
    if chat is not None:
        if chat.user_id != user_id:
            logger.warning("User %s tried to use chat %s owned by someone else", user_id, chat_id)
            raise ChatAccessError("Cannot access other user chats")
        return chat

    return await stores.chats.create_chat(
        chat_id=chat_id or str(uuid.uuid4()),
        user_id=user_id,
        title=NEW_CHAT_TITLE,
        initial_fatigue_level=initial_fatigue_level,
    )


async def generate_reply(ctx: TurnContext, system_prompt: str, history: list[dict]) -> Optional[str]:
    """Model reply text, or None when the fallback should be used."""
    if not llm.is_configured():
        logger.info("No LLM provider configured, using fallback reply")
        return None

    ai = ctx.ai_settings
    timeout = get_settings().llm_timeout_seconds
    try:
        reply = await asyncio.wait_for(
            llm.complete(
                system_prompt,
                history,
                model=ai.model,
                temperature=ai.temperature,
                max_tokens=ai.max_tokens,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.error("LLM call timed out after %.0fs, using fallback reply", timeout)
        return None
    except Exception as e:
        logger.error("LLM call failed, using fallback reply: %s", e)
        return None

    if not reply or not reply.strip():
        logger.warning("LLM returned an empty reply, using fallback reply")
        return None
    return reply


async def handle_turn(
    stores: Stores,
    user_id: str,
    message: str,
    chat_id: Optional[str] = None,
    initial_fatigue_level: Optional[float] = None,
    updater: Optional[DynamicProfileUpdater] = None,
) -> TurnResult:
    start = time.monotonic()

    # 1. Chat (created on first use, anchor fixed there)
    chat = await get_or_create_chat(stores, user_id, chat_id, initial_fatigue_level)
    if message == INIT_MESSAGE:
        return TurnResult(chat_id=chat.id, response=INIT_MESSAGE)

    prior_count = await stores.chats.count_messages(chat.id)

    # 2. Save user message, title the chat from it
    await stores.chats.add_message(chat.id, "user", message)
    if not chat.title or chat.title == NEW_CHAT_TITLE:
        await stores.chats.set_title(chat.id, chat_title(message))

    await realtime.chat_started(user_id, chat.id, {"message": message[:100]})

    # 3. Context, catalogs, prompt
    ctx = await resolve_turn_context(stores, user_id, chat)
    catalogs = await provide_tool_catalogs(ctx, stores.catalog)
    system_prompt = compose_system_prompt(
        ctx, catalogs, message=message, has_prior_turns=prior_count > 0,
    )

    # 4. Model call over the most recent messages (current one included)
    messages = await stores.chats.list_messages(chat.id)
    history = [_as_turn(m) for m in messages[-CONTEXT_MESSAGES:]]
    # Nothing stays locked while the model thinks
    await stores.commit()
    reply = await generate_reply(ctx, system_prompt, history)
    used_fallback = reply is None
    if used_fallback:
        reply = FALLBACK_REPLY

    checked = check_output(reply)
    if checked.modified_input is not None:
        reply = checked.modified_input

    # 5. Directives out, reply saved with its media
    parsed: ParsedReply = parse_reply(reply)
    await stores.chats.add_message(chat.id, "assistant", parsed.text, media=media_payload(parsed))
    await stores.commit()
    if parsed.has_media:
        logger.info(
            "Reply for chat %s carried %d video(s), %d breathing exercise(s)",
            chat.id, len(parsed.videos), len(parsed.breathing),
        )

    # 6. Background profile refresh; the turn does not wait for it
    queued = False
    message_count = prior_count + 2
    if updater is not None and should_update_profile(message_count, ctx.ai_settings.memory_enabled):
        job_history = [_as_turn(m) for m in messages[-(HISTORY_LIMIT - 1):]]
        job_history.append({"role": "assistant", "content": parsed.text})
        queued = updater.submit(ProfileUpdateJob(
            user_id=user_id,
            chat_id=chat.id,
            history=job_history,
            current_profile=ctx.dynamic_profile,
        ))

    elapsed = time.monotonic() - start
    await realtime.chat_completed(user_id, chat.id, {
        "fallback": used_fallback,
        "videos": len(parsed.videos),
        "breathing": len(parsed.breathing),
        "elapsed_ms": int(elapsed * 1000),
    })

    return TurnResult(
        chat_id=chat.id,
        response=parsed.text.strip(),
        videos=[v.to_dict() for v in parsed.videos],
        breathing=[b.to_dict() for b in parsed.breathing],
        used_fallback=used_fallback,
        profile_update_queued=queued,
    )
