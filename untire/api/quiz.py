"""
Fatigue quiz API.

GET  /api/fatigue-quiz/questions  — Questions in order
POST /api/fatigue-quiz/calculate  — Answers → suggested 1-10 fatigue level
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import get_db, get_user
from ..services.fatigue_quiz import QuizAnswer, list_questions, score_answers

quiz_router = APIRouter(prefix="/fatigue-quiz", tags=["fatigue-quiz"])


class AnswerIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(alias="questionId")
    option_value: float = Field(alias="optionValue", ge=0, le=1)


class CalculateRequest(BaseModel):
    answers: list[AnswerIn]


@quiz_router.get("/questions")
async def questions(
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await list_questions(db)
    return {
        "questions": [
            {
                "id": q.id,
                "question_text": q.question_text,
                "question_order": q.question_order,
                "options": q.options or [],
                "weight": q.weight,
            }
            for q in rows
        ]
    }


@quiz_router.post("/calculate")
async def calculate(
    request: CalculateRequest,
    user: AuthenticatedUser = Depends(get_user),
    db: AsyncSession = Depends(get_db),
):
    level = await score_answers(
        db, [QuizAnswer(a.question_id, a.option_value) for a in request.answers],
    )
    return {"suggestedFatigueLevel": level}
