"""
Static user profile plus the model-derived dynamic profile text.
"""

from datetime import date

from sqlalchemy import String, Text, Integer, Float, Date
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class Profile(RecordBase):
    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)

    name: Mapped[str] = mapped_column(String, nullable=True)
    age: Mapped[int] = mapped_column(Integer, nullable=True)
    gender: Mapped[str] = mapped_column(String, nullable=True)
    ethnicity: Mapped[str] = mapped_column(String, nullable=True)
    cancer_type: Mapped[str] = mapped_column(String, nullable=True)
    treatment_stage: Mapped[str] = mapped_column(String, nullable=True)
    diagnosis_date: Mapped[str] = mapped_column(String, nullable=True)
    location: Mapped[str] = mapped_column(String, nullable=True)
    support_system: Mapped[str] = mapped_column(Text, nullable=True)

    # "Typical" fatigue on a 0-10 scale, set by the user or the fatigue quiz
    current_fatigue_level: Mapped[float] = mapped_column(Float, nullable=True)
    last_fatigue_asked_date: Mapped[date] = mapped_column(Date, nullable=True)

    # Written only by the background profile updater
    dynamic_profile: Mapped[str] = mapped_column(Text, nullable=True)
