"""
Per-user behavior settings and the global, admin-controlled AI settings row.
"""

from sqlalchemy import String, Text, Integer, Float, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase

AI_SETTINGS_KEY = "global"


class UserSettings(RecordBase):
    __tablename__ = "user_settings"

    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    behavior_type: Mapped[str] = mapped_column(String, nullable=False, default="empathetic")
    agentic_features: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    chat_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class AISettings(RecordBase):
    """Singleton. Looked up by key, lazily created with defaults."""

    __tablename__ = "ai_settings"

    key: Mapped[str] = mapped_column(String, unique=True, nullable=False, default=AI_SETTINGS_KEY)
    model: Mapped[str] = mapped_column(String, nullable=False)
    temperature: Mapped[float] = mapped_column(Float, nullable=False, default=0.8)
    max_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=500)
    # Empty → the built-in persona is used
    system_prompt: Mapped[str] = mapped_column(Text, nullable=True)
    enabled_tools: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    verbosity: Mapped[str] = mapped_column(String, nullable=False, default="medium")
    memory_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    accessible_user_fields: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
