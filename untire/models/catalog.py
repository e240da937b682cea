"""
Admin-managed catalogs the coach can suggest: videos and breathing exercises.
"""

from sqlalchemy import String, Text, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class Video(RecordBase):
    __tablename__ = "videos"

    title: Mapped[str] = mapped_column(String, nullable=False)
    url: Mapped[str] = mapped_column(String, nullable=False)
    embed_url: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=True, index=True)
    tags: Mapped[str] = mapped_column(String, nullable=True)  # comma separated


class BreathingExercise(RecordBase):
    __tablename__ = "breathing_exercises"

    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=True)  # seconds
    pattern: Mapped[str] = mapped_column(String, nullable=True)
    embed_code: Mapped[str] = mapped_column(Text, nullable=True)
