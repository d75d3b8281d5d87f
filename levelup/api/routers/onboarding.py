# =====================================================================
# ROUTER - api/routers/onboarding.py
# =====================================================================

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from levelup.core.clock import get_now
from levelup.core.config import get_db
from levelup.core.exceptions import ValidationError
from levelup.core.security import get_current_user_optional
from levelup.models.user import User
from levelup.schemas.onboarding import (
    OnboardingQuestionList,
    OnboardingResult,
    OnboardingSubmitRequest,
)
from levelup.services.onboarding import onboarding_service

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])


@router.get(
    "/questions",
    response_model=OnboardingQuestionList,
    summary="List onboarding questions",
)
def list_questions(
    lang: Optional[str] = Query(None, description="Questionnaire language (default fr)"),
    user_id: Optional[int] = Query(None, description="Reject if this user already onboarded"),
    db: Session = Depends(get_db),
):
    """
    Active questions for a language, in display order.

    Returns 409 when `user_id` has already completed onboarding.
    """
    return onboarding_service.list_questions(db=db, language=lang, user_id=user_id)


@router.post(
    "/answers",
    response_model=OnboardingResult,
    summary="Submit onboarding answers",
)
def submit_answers(
    payload: OnboardingSubmitRequest,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Score the questionnaire and seed the user's category priorities.

    **Rules:**
    - Answers are integers from 1 to 5; malformed entries are ignored
    - At least 12 valid answers to active questions are required
    - Can only be submitted once per user

    The user is taken from the body, or from the bearer token if omitted.
    """
    user_id = payload.user_id or (current_user.id if current_user else None)
    if not user_id:
        raise ValidationError("user_id is required")

    return onboarding_service.submit_answers(
        db=db,
        user_id=user_id,
        language=payload.language,
        answers=payload.answers,
        submitted_at=now,
    )
