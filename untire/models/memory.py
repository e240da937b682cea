"""
Saved memories: cards the user keeps on purpose.

Distinct from Profile.dynamic_profile, which only the background
extractor writes.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class SavedMemory(RecordBase):
    __tablename__ = "saved_memories"

    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=True)
