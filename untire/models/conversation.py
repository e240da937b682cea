"""
Chats and their append-only message log.

A chat's initial_fatigue_level is the fatigue anchor: fixed when the chat
is created and read-only afterwards.
"""

from sqlalchemy import String, Text, Integer, Float, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from .base import RecordBase


class ImmutableFieldError(ValueError):
    """Raised when code tries to rewrite a value that is fixed once set."""


class Chat(RecordBase):
    __tablename__ = "chats"

    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=True)
    initial_fatigue_level: Mapped[float] = mapped_column(Float, nullable=True)

    messages: Mapped[list["Message"]] = relationship(
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="Message.sequence_number",
    )

    @validates("initial_fatigue_level")
    def _anchor_is_write_once(self, key, value):
        current = self.__dict__.get(key)
        if current is not None and value != current:
            raise ImmutableFieldError("A chat's fatigue anchor cannot be changed")
        return value


class Message(RecordBase):
    __tablename__ = "messages"

    chat_id: Mapped[str] = mapped_column(
        String, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String, nullable=False)  # user, assistant
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Assistant-only: {"videos": [...] | None, "breathing": [...] | None}
    media: Mapped[dict] = mapped_column(JSON, nullable=True)

    chat: Mapped["Chat"] = relationship(back_populates="messages")
