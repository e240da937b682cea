"""
Seed the catalogs and the fatigue quiz.

Run with: python -m untire.seed
Safe to run more than once; existing titles and questions are skipped.
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .core.database import close_db, init_db, session_scope
from .models.catalog import BreathingExercise, Video
from .models.quiz import FatigueQuizQuestion

logger = logging.getLogger(__name__)

VIDEOS = [
    {
        "title": "Deep Meditation",
        "url": "https://youtu.be/3-fESb8KTCk",
        "embed_url": "https://www.youtube.com/embed/3-fESb8KTCk",
        "category": "meditation",
        "tags": "meditation,deep,relaxation,stress-relief",
    },
    {
        "title": "Sleep Meditation",
        "url": "https://youtu.be/_n3kHdZrq7U",
        "embed_url": "https://www.youtube.com/embed/_n3kHdZrq7U",
        "category": "meditation",
        "tags": "meditation,sleep,relaxation,insomnia",
    },
    {
        "title": "Gentle Yoga",
        "url": "https://youtu.be/3X0hEHop8ec",
        "embed_url": "https://www.youtube.com/embed/3X0hEHop8ec",
        "category": "yoga",
        "tags": "yoga,gentle,exercise,movement,wellness",
    },
    {
        "title": "Therapeutic ASMR",
        "url": "https://youtu.be/Fq1wR3UPG1I",
        "embed_url": "https://www.youtube.com/embed/Fq1wR3UPG1I",
        "category": "asmr",
        "tags": "asmr,therapeutic,relaxation,stress-relief,sleep",
    },
]

BREATHING = [
    {
        "title": "4-7-8 Breathing",
        "description": "A calming breathing technique that helps reduce stress and anxiety",
        "duration": 120,
        "pattern": "Breathe in for 4 counts, hold for 7, exhale for 8",
        "embed_code": "",
    },
    {
        "title": "Box Breathing",
        "description": "Simple 4-count breathing pattern for relaxation",
        "duration": 60,
        "pattern": "Inhale 4, hold 4, exhale 4, hold 4",
        "embed_code": "",
    },
    {
        "title": "Deep Belly Breathing",
        "description": "Gentle deep breathing to activate relaxation response",
        "duration": 90,
        "pattern": "Slow deep breaths, focusing on belly expansion",
        "embed_code": "",
    },
]


def _options(*texts: str) -> list[dict]:
    # Five answers, least to most fatigued
    return [{"text": t, "value": v} for t, v in zip(texts, (0.1, 0.3, 0.5, 0.7, 0.9))]


QUIZ = [
    {
        "question_text": "How would you rate your overall energy level right now?",
        "question_order": 1,
        "weight": 1.5,
        "options": _options(
            "Very high energy, feeling great",
            "Good energy, feeling normal",
            "Moderate energy, a bit tired",
            "Low energy, quite tired",
            "Very low energy, extremely tired",
        ),
    },
    {
        "question_text": "How difficult is it for you to complete daily activities?",
        "question_order": 2,
        "weight": 1.5,
        "options": _options(
            "Not difficult at all",
            "Slightly difficult",
            "Moderately difficult",
            "Very difficult",
            "Extremely difficult, can barely function",
        ),
    },
    {
        "question_text": "How would you describe your ability to concentrate?",
        "question_order": 3,
        "weight": 1.0,
        "options": _options(
            "Excellent, no problems focusing",
            "Good, minor concentration issues",
            "Moderate, some difficulty focusing",
            "Poor, significant concentration problems",
            "Very poor, can't concentrate at all",
        ),
    },
    {
        "question_text": "How has your sleep been affecting your fatigue?",
        "question_order": 4,
        "weight": 1.2,
        "options": _options(
            "Sleeping well, feel rested",
            "Sleeping okay, mostly rested",
            "Sleep is okay but not fully restorative",
            "Poor sleep, feel tired",
            "Very poor sleep, extremely tired",
        ),
    },
    {
        "question_text": "How much does fatigue interfere with your daily life?",
        "question_order": 5,
        "weight": 1.3,
        "options": _options(
            "Not at all",
            "A little bit",
            "Moderately",
            "Quite a bit",
            "Extremely, it's overwhelming",
        ),
    },
]


async def seed(db: AsyncSession) -> dict:
    """Insert whatever is missing. Returns how many rows of each kind were added."""
    added = {"videos": 0, "breathing": 0, "questions": 0}

    existing = set((await db.execute(select(Video.title))).scalars().all())
    for video in VIDEOS:
        if video["title"] not in existing:
            db.add(Video(**video))
            added["videos"] += 1

    existing = set((await db.execute(select(BreathingExercise.title))).scalars().all())
    for exercise in BREATHING:
        if exercise["title"] not in existing:
            db.add(BreathingExercise(**exercise))
            added["breathing"] += 1

    existing = set((await db.execute(select(FatigueQuizQuestion.question_text))).scalars().all())
    for question in QUIZ:
        if question["question_text"] not in existing:
            db.add(FatigueQuizQuestion(**question))
            added["questions"] += 1

    await db.flush()
    logger.info(
        "Seeded %d videos, %d breathing exercises, %d quiz questions",
        added["videos"], added["breathing"], added["questions"],
    )
    return added


async def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    await init_db()
    async with session_scope() as db:
        await seed(db)
    await close_db()


if __name__ == "__main__":
    asyncio.run(main())
