"""
SQLAlchemy implementation of the store interfaces.

Every store wraps the caller's AsyncSession and only flushes; committing is
the session owner's job (the request dependency or session_scope).
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select, func, delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_settings
from ..models.base import utcnow
from ..models.catalog import Video, BreathingExercise
from ..models.conversation import Chat, Message
from ..models.memory import SavedMemory
from ..models.profile import Profile
from ..models.settings import AISettings, UserSettings, AI_SETTINGS_KEY
from ..models.user import UserSession
from .base import CatalogStore, ChatStore, ProfileStore, SettingsStore, Stores
from .records import (
    AISettingsRecord,
    BreathingEntry,
    ChatRecord,
    DEFAULT_ENABLED_TOOLS,
    MessageRecord,
    PROFILE_FIELD_NAMES,
    ProfileRecord,
    UserSettingsRecord,
    VideoEntry,
)

logger = logging.getLogger(__name__)

_PROFILE_WRITABLE = set(PROFILE_FIELD_NAMES) | {"last_fatigue_asked_date"}
_USER_SETTINGS_WRITABLE = {"behavior_type", "agentic_features", "chat_only"}
_AI_SETTINGS_WRITABLE = {
    "model", "temperature", "max_tokens", "system_prompt", "enabled_tools",
    "verbosity", "memory_enabled", "accessible_user_fields",
}


# ── Row → record conversion ──────────────────────────────────────────

def _profile_record(row: Profile) -> ProfileRecord:
    return ProfileRecord(
        user_id=row.user_id,
        name=row.name,
        age=row.age,
        gender=row.gender,
        ethnicity=row.ethnicity,
        cancer_type=row.cancer_type,
        treatment_stage=row.treatment_stage,
        diagnosis_date=row.diagnosis_date,
        current_fatigue_level=row.current_fatigue_level,
        location=row.location,
        support_system=row.support_system,
        last_fatigue_asked_date=row.last_fatigue_asked_date,
        dynamic_profile=row.dynamic_profile or "",
    )


def _user_settings_record(row: UserSettings) -> UserSettingsRecord:
    return UserSettingsRecord(
        user_id=row.user_id,
        behavior_type=row.behavior_type,
        agentic_features=bool(row.agentic_features),
        chat_only=bool(row.chat_only),
    )


def _ai_settings_record(row: AISettings) -> AISettingsRecord:
    return AISettingsRecord(
        model=row.model,
        temperature=row.temperature,
        max_tokens=row.max_tokens,
        system_prompt=row.system_prompt,
        enabled_tools=tuple(row.enabled_tools or ()),
        verbosity=row.verbosity,
        memory_enabled=bool(row.memory_enabled),
        accessible_user_fields=tuple(row.accessible_user_fields or ()),
    )


def _chat_record(row: Chat) -> ChatRecord:
    return ChatRecord(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        initial_fatigue_level=row.initial_fatigue_level,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _message_record(row: Message) -> MessageRecord:
    return MessageRecord(
        id=row.id,
        chat_id=row.chat_id,
        role=row.role,
        content=row.content or "",
        sequence_number=row.sequence_number,
        media=row.media,
        created_at=row.created_at,
    )


def _video_entry(row: Video) -> VideoEntry:
    return VideoEntry(
        id=row.id,
        title=row.title,
        embed_url=row.embed_url,
        url=row.url,
        category=row.category,
        tags=row.tags,
    )


def _breathing_entry(row: BreathingExercise) -> BreathingEntry:
    return BreathingEntry(
        id=row.id,
        title=row.title,
        duration=row.duration,
        pattern=row.pattern,
        embed_code=row.embed_code,
        description=row.description,
    )


# ── Profiles ─────────────────────────────────────────────────────────

class SqlProfileStore(ProfileStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _row(self, user_id: str) -> Optional[Profile]:
        result = await self.db.execute(select(Profile).where(Profile.user_id == user_id))
        return result.scalar_one_or_none()

    async def _row_or_new(self, user_id: str) -> Profile:
        row = await self._row(user_id)
        if row is None:
            row = Profile(user_id=user_id)
            self.db.add(row)
        return row

    async def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        row = await self._row(user_id)
        return _profile_record(row) if row else None

    async def upsert_profile(self, user_id: str, fields: dict) -> ProfileRecord:
        row = await self._row_or_new(user_id)
        for key, value in fields.items():
            if key in _PROFILE_WRITABLE and value is not None:
                setattr(row, key, value)
        await self.db.flush()
        await self.db.refresh(row)
        return _profile_record(row)

    async def get_dynamic_profile(self, user_id: str) -> str:
        row = await self._row(user_id)
        return (row.dynamic_profile or "") if row else ""

    async def set_dynamic_profile(self, user_id: str, text: str) -> None:
        row = await self._row_or_new(user_id)
        row.dynamic_profile = text
        await self.db.flush()

    async def mark_fatigue_asked(self, user_id: str, day: date) -> None:
        row = await self._row_or_new(user_id)
        row.last_fatigue_asked_date = day
        await self.db.flush()


# ── Settings ─────────────────────────────────────────────────────────

class SqlSettingsStore(SettingsStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _user_row(self, user_id: str) -> UserSettings:
        result = await self.db.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = UserSettings(
                user_id=user_id,
                behavior_type="empathetic",
                agentic_features=True,
                chat_only=False,
            )
            self.db.add(row)
            await self.db.flush()
            logger.info("Created default settings for user %s", user_id)
        return row

    async def get_user_settings(self, user_id: str) -> UserSettingsRecord:
        return _user_settings_record(await self._user_row(user_id))

    async def update_user_settings(self, user_id: str, fields: dict) -> UserSettingsRecord:
        row = await self._user_row(user_id)
        for key, value in fields.items():
            if key in _USER_SETTINGS_WRITABLE and value is not None:
                setattr(row, key, value)
        await self.db.flush()
        return _user_settings_record(row)

    async def _ai_row(self) -> AISettings:
        result = await self.db.execute(
            select(AISettings).where(AISettings.key == AI_SETTINGS_KEY)
        )
        row = result.scalar_one_or_none()
        if row is None:
            settings = get_settings()
            row = AISettings(
                key=AI_SETTINGS_KEY,
                model=settings.default_llm_model,
                temperature=settings.default_llm_temperature,
                max_tokens=settings.default_llm_max_tokens,
                system_prompt=None,
                enabled_tools=list(DEFAULT_ENABLED_TOOLS),
                verbosity="medium",
                memory_enabled=True,
                accessible_user_fields=list(PROFILE_FIELD_NAMES),
            )
            self.db.add(row)
            await self.db.flush()
            logger.info("Created default AI settings (model=%s)", row.model)
        return row

    async def get_ai_settings(self) -> AISettingsRecord:
        return _ai_settings_record(await self._ai_row())

    async def update_ai_settings(self, fields: dict) -> AISettingsRecord:
        row = await self._ai_row()
        for key, value in fields.items():
            if key not in _AI_SETTINGS_WRITABLE:
                continue
            if isinstance(value, tuple):
                value = list(value)
            setattr(row, key, value)
        await self.db.flush()
        return _ai_settings_record(row)


# ── Chats ────────────────────────────────────────────────────────────

class SqlChatStore(ChatStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_chat(self, chat_id: str) -> Optional[ChatRecord]:
        row = await self.db.get(Chat, chat_id)
        return _chat_record(row) if row else None

    async def create_chat(
        self,
        chat_id: str,
        user_id: str,
        title: str,
        initial_fatigue_level: Optional[float] = None,
    ) -> ChatRecord:
        row = Chat(
            id=chat_id,
            user_id=user_id,
            title=title,
            initial_fatigue_level=initial_fatigue_level,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        logger.info("Created chat %s for user %s", chat_id, user_id)
        return _chat_record(row)

    async def set_title(self, chat_id: str, title: str) -> None:
        row = await self.db.get(Chat, chat_id)
        if row is None:
            return
        row.title = title
        row.updated_at = utcnow()
        await self.db.flush()

    async def list_chats(self, user_id: str, limit: int = 10) -> list[ChatRecord]:
        result = await self.db.execute(
            select(Chat)
            .where(Chat.user_id == user_id)
            .order_by(Chat.updated_at.desc(), Chat.created_at.desc())
            .limit(limit)
        )
        return [_chat_record(c) for c in result.scalars().all()]

    async def add_message(
        self,
        chat_id: str,
        role: str,
        content: str,
        media: Optional[dict] = None,
    ) -> MessageRecord:
        result = await self.db.execute(
            select(func.max(Message.sequence_number)).where(Message.chat_id == chat_id)
        )
        last = result.scalar()
        seq = (last or 0) + 1

        msg = Message(
            chat_id=chat_id,
            role=role,
            content=content,
            sequence_number=seq,
            media=media,
        )
        self.db.add(msg)

        chat = await self.db.get(Chat, chat_id)
        if chat is not None:
            chat.updated_at = utcnow()

        await self.db.flush()
        await self.db.refresh(msg)
        return _message_record(msg)

    async def list_messages(self, chat_id: str) -> list[MessageRecord]:
        result = await self.db.execute(
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(Message.sequence_number.asc())
        )
        return [_message_record(m) for m in result.scalars().all()]

    async def count_messages(self, chat_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Message).where(Message.chat_id == chat_id)
        )
        return result.scalar_one()

    async def delete_chat(self, chat_id: str) -> None:
        await self.db.execute(sql_delete(Message).where(Message.chat_id == chat_id))
        await self.db.execute(sql_delete(Chat).where(Chat.id == chat_id))
        await self.db.flush()


# ── Catalogs ─────────────────────────────────────────────────────────

class SqlCatalogStore(CatalogStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_videos(self, category: Optional[str] = None) -> list[VideoEntry]:
        query = select(Video).order_by(Video.title.asc())
        if category:
            query = query.where(Video.category == category)
        result = await self.db.execute(query)
        return [_video_entry(v) for v in result.scalars().all()]

    async def add_video(
        self,
        title: str,
        url: str,
        embed_url: str,
        category: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> VideoEntry:
        row = Video(title=title, url=url, embed_url=embed_url, category=category, tags=tags)
        self.db.add(row)
        await self.db.flush()
        return _video_entry(row)

    async def delete_video(self, video_id: str) -> bool:
        result = await self.db.execute(sql_delete(Video).where(Video.id == video_id))
        return result.rowcount > 0

    async def list_breathing(self) -> list[BreathingEntry]:
        result = await self.db.execute(
            select(BreathingExercise).order_by(BreathingExercise.title.asc())
        )
        return [_breathing_entry(b) for b in result.scalars().all()]

    async def add_breathing(
        self,
        title: str,
        description: Optional[str] = None,
        duration: Optional[int] = None,
        pattern: Optional[str] = None,
        embed_code: Optional[str] = None,
    ) -> BreathingEntry:
        row = BreathingExercise(
            title=title,
            description=description,
            duration=duration,
            pattern=pattern,
            embed_code=embed_code,
        )
        self.db.add(row)
        await self.db.flush()
        return _breathing_entry(row)

    async def delete_breathing(self, exercise_id: str) -> bool:
        result = await self.db.execute(
            sql_delete(BreathingExercise).where(BreathingExercise.id == exercise_id)
        )
        return result.rowcount > 0


def sql_stores(db: AsyncSession) -> Stores:
    """All four stores over one session."""
    return Stores(
        profiles=SqlProfileStore(db),
        settings=SqlSettingsStore(db),
        chats=SqlChatStore(db),
        catalog=SqlCatalogStore(db),
        committer=db.commit,
    )


async def delete_user_data(db: AsyncSession, user_id: str) -> None:
    """Remove everything stored for a user except the account itself."""
    chat_ids = select(Chat.id).where(Chat.user_id == user_id)
    await db.execute(sql_delete(Message).where(Message.chat_id.in_(chat_ids)))
    await db.execute(sql_delete(Chat).where(Chat.user_id == user_id))
    await db.execute(sql_delete(Profile).where(Profile.user_id == user_id))
    await db.execute(sql_delete(UserSettings).where(UserSettings.user_id == user_id))
    await db.execute(sql_delete(SavedMemory).where(SavedMemory.user_id == user_id))
    await db.execute(sql_delete(UserSession).where(UserSession.user_id == user_id))
    logger.info("Deleted all data for user %s", user_id)
