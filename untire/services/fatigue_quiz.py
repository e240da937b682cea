"""
Fatigue self-assessment: quiz scoring and the "should we ask today?" rule.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.quiz import FatigueQuizQuestion
from ..stores.records import ProfileRecord

logger = logging.getLogger(__name__)

NEUTRAL_LEVEL = 5.0
MIN_LEVEL = 1.0
MAX_LEVEL = 10.0


@dataclass
class QuizAnswer:
    question_id: str
    option_value: float  # 0-1


def _round_half_up(value: float, places: int = 1) -> float:
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def fatigue_level_from_scores(weighted: list[tuple[float, float]]) -> float:
    """
    (option_value, weight) pairs → a 1-10 fatigue level.

    Weighted mean of 0-1 option values scaled to 10, one decimal, clamped.
    Nothing weighted gives the neutral midpoint.
    """
    total_weight = sum(w for _, w in weighted)
    if total_weight <= 0:
        return NEUTRAL_LEVEL
    mean = sum(v * w for v, w in weighted) / total_weight
    return min(MAX_LEVEL, max(MIN_LEVEL, _round_half_up(mean * 10)))


async def list_questions(db: AsyncSession) -> list[FatigueQuizQuestion]:
    result = await db.execute(
        select(FatigueQuizQuestion).order_by(FatigueQuizQuestion.question_order.asc())
    )
    return list(result.scalars().all())


async def score_answers(db: AsyncSession, answers: list[QuizAnswer]) -> float:
    """Answers to unknown questions are ignored."""
    ids = {a.question_id for a in answers}
    weights = {}
    if ids:
        result = await db.execute(
            select(FatigueQuizQuestion).where(FatigueQuizQuestion.id.in_(ids))
        )
        weights = {q.id: (q.weight or 1.0) for q in result.scalars().all()}

    weighted = [
        (a.option_value, weights[a.question_id])
        for a in answers
        if a.question_id in weights
    ]
    level = fatigue_level_from_scores(weighted)
    logger.info("Fatigue quiz scored %d/%d answers → %.1f", len(weighted), len(answers), level)
    return level


def should_ask_fatigue(profile: Optional[ProfileRecord], today: date) -> dict:
    if profile is None:
        return {"shouldAsk": True, "reason": "no_profile"}

    if profile.current_fatigue_level is not None:
        return {
            "shouldAsk": False,
            "reason": "has_typical_fatigue",
            "typicalFatigue": profile.current_fatigue_level,
        }

    if profile.last_fatigue_asked_date == today:
        return {"shouldAsk": False, "reason": "asked_today"}

    return {"shouldAsk": True, "reason": "not_asked_today"}
