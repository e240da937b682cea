"""
Fatigue self-assessment quiz questions.
"""

from sqlalchemy import Text, Integer, Float, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class FatigueQuizQuestion(RecordBase):
    __tablename__ = "fatigue_quiz_questions"

    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    question_order: Mapped[int] = mapped_column(Integer, nullable=False)
    # [{"text": "...", "value": 0.1}, ...], values on a 0-1 scale
    options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    weight: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
