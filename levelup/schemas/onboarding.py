# schemas/onboarding.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, List, Optional


# =====================================================================
# QUESTIONS
# =====================================================================

class OnboardingQuestionOut(BaseModel):
    """A questionnaire entry as shown to the user."""
    id: int
    code: str
    question: str
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class OnboardingQuestionList(BaseModel):
    language: str
    count: int
    items: List[OnboardingQuestionOut]


# =====================================================================
# ANSWERS
# =====================================================================

class OnboardingAnswerIn(BaseModel):
    """
    One raw answer.

    Fields stay loose on purpose: malformed entries are filtered out by the
    scoring engine rather than rejecting the whole submission.
    """
    question_id: Optional[Any] = None
    value: Optional[Any] = None

    model_config = ConfigDict(extra="ignore")


class OnboardingSubmitRequest(BaseModel):
    user_id: Optional[int] = Field(None, description="Falls back to the authenticated user")
    language: Optional[str] = Field(None, description="Questionnaire language, defaults to fr")
    answers: List[OnboardingAnswerIn] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 1,
                "language": "fr",
                "answers": [{"question_id": 1, "value": 4}, {"question_id": 2, "value": 2}],
            }
        }


class CategoryScore(BaseModel):
    category_id: int
    category_name: str
    score: float = Field(..., ge=0, le=100)
    rank: int = Field(..., ge=1)


class OnboardingResult(BaseModel):
    onboarding_done: bool
    user_id: int
    priorities: List[CategoryScore]
