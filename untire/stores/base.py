"""
Storage interfaces the coaching core depends on.

One production implementation lives in stores.sql. The core only ever talks
to these abstract classes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, Optional

from .records import (
    AISettingsRecord,
    BreathingEntry,
    ChatRecord,
    MessageRecord,
    ProfileRecord,
    UserSettingsRecord,
    VideoEntry,
)


class ProfileStore(ABC):
    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        ...

    @abstractmethod
    async def upsert_profile(self, user_id: str, fields: dict) -> ProfileRecord:
        """Partial merge. Keys absent from `fields` (or None) keep their value."""
        ...

    @abstractmethod
    async def get_dynamic_profile(self, user_id: str) -> str:
        ...

    @abstractmethod
    async def set_dynamic_profile(self, user_id: str, text: str) -> None:
        """Overwrite wholesale. Creates the profile row if needed."""
        ...

    @abstractmethod
    async def mark_fatigue_asked(self, user_id: str, day: date) -> None:
        ...


class SettingsStore(ABC):
    """Per-user behavior settings plus the global AI settings service."""

    @abstractmethod
    async def get_user_settings(self, user_id: str) -> UserSettingsRecord:
        """Lazily creates the row with defaults."""
        ...

    @abstractmethod
    async def update_user_settings(self, user_id: str, fields: dict) -> UserSettingsRecord:
        ...

    @abstractmethod
    async def get_ai_settings(self) -> AISettingsRecord:
        """Lazily creates the singleton with defaults."""
        ...

    @abstractmethod
    async def update_ai_settings(self, fields: dict) -> AISettingsRecord:
        ...


class ChatStore(ABC):
    @abstractmethod
    async def get_chat(self, chat_id: str) -> Optional[ChatRecord]:
        ...

    @abstractmethod
    async def create_chat(
        self,
        chat_id: str,
        user_id: str,
        title: str,
        initial_fatigue_level: Optional[float] = None,
    ) -> ChatRecord:
        ...

    @abstractmethod
    async def set_title(self, chat_id: str, title: str) -> None:
        ...

    @abstractmethod
    async def list_chats(self, user_id: str, limit: int = 10) -> list[ChatRecord]:
        ...

    @abstractmethod
    async def add_message(
        self,
        chat_id: str,
        role: str,
        content: str,
        media: Optional[dict] = None,
    ) -> MessageRecord:
        ...

    @abstractmethod
    async def list_messages(self, chat_id: str) -> list[MessageRecord]:
        """All messages, oldest first."""
        ...

    @abstractmethod
    async def count_messages(self, chat_id: str) -> int:
        ...

    @abstractmethod
    async def delete_chat(self, chat_id: str) -> None:
        ...


class CatalogStore(ABC):
    @abstractmethod
    async def list_videos(self, category: Optional[str] = None) -> list[VideoEntry]:
        ...

    @abstractmethod
    async def add_video(
        self,
        title: str,
        url: str,
        embed_url: str,
        category: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> VideoEntry:
        ...

    @abstractmethod
    async def delete_video(self, video_id: str) -> bool:
        ...

    @abstractmethod
    async def list_breathing(self) -> list[BreathingEntry]:
        ...

    @abstractmethod
    async def add_breathing(
        self,
        title: str,
        description: Optional[str] = None,
        duration: Optional[int] = None,
        pattern: Optional[str] = None,
        embed_code: Optional[str] = None,
    ) -> BreathingEntry:
        ...

    @abstractmethod
    async def delete_breathing(self, exercise_id: str) -> bool:
        ...


@dataclass
class Stores:
    """The four stores one turn needs, bundled for injection."""

    profiles: ProfileStore
    settings: SettingsStore
    chats: ChatStore
    catalog: CatalogStore
    # Ends the current unit of work; None when the stores are not transactional
    committer: Optional[Callable[[], Awaitable[None]]] = None

    async def commit(self) -> None:
        """Make everything written so far durable and release write locks."""
        if self.committer is not None:
            await self.committer()
