# =====================================================================
# SERVICE LAYER - services/onboarding.py
# =====================================================================

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session

from levelup.core.clock import local_now
from levelup.core.config import settings
from levelup.core.exceptions import ConflictError, NotFoundError, ValidationError
from levelup.core.locks import row_locks, user_key
from levelup.crud.categories import crud_category
from levelup.crud.onboarding import crud_onboarding
from levelup.crud.user_priorities import crud_user_priorities
from levelup.crud.users import crud_user
from levelup.models.onboarding import OnboardingQuestion, OnboardingQuestionWeight
from levelup.utils.coerce import as_id, as_int
from levelup.utils.leveling import round_half_up

logger = logging.getLogger(__name__)

NEUTRAL_ANSWER = 3
NEUTRAL_SCORE = 50.0


# =====================================================================
# EXCEPTIONS
# =====================================================================


class OnboardingAlreadyCompletedError(ConflictError):
    """Onboarding already completed."""
    code = "onboarding_already_completed"


class InsufficientAnswersError(ValidationError):
    """Not enough valid answers."""
    code = "insufficient_answers"


# =====================================================================
# SCORING
# =====================================================================


def parse_answers(raw_answers: Iterable[Any]) -> List[Tuple[int, int]]:
    """Keep (question_id, value) pairs with a positive id and a value in 1..5."""
    parsed = []
    for entry in raw_answers or []:
        if isinstance(entry, dict):
            question_id, value = entry.get("question_id"), entry.get("value")
        else:
            question_id = getattr(entry, "question_id", None)
            value = getattr(entry, "value", None)

        question_id, value = as_id(question_id), as_int(value)
        if question_id is None or value is None:
            continue
        if 1 <= value <= 5:
            parsed.append((question_id, value))
    return parsed


def raw_category_scores(
    answers: List[Tuple[int, int]],
    weights: Iterable[OnboardingQuestionWeight],
    category_ids: Iterable[int],
) -> Dict[int, float]:
    """
    Sum (answer - 3) * weight per category.

    Every category in `category_ids` gets an entry, 0.0 when no answered
    question touches it.
    """
    answer_by_question = dict(answers)
    scores: Dict[int, float] = {category_id: 0.0 for category_id in category_ids}

    for weight in weights:
        value = answer_by_question.get(weight.question_id)
        if value is None:
            continue
        contribution = (value - NEUTRAL_ANSWER) * float(weight.weight)
        scores[weight.category_id] = scores.get(weight.category_id, 0.0) + contribution

    return scores


def normalize_scores(raw_scores: Dict[int, float]) -> Dict[int, float]:
    """Project raw scores onto 0..100 (one decimal); all equal -> 50.0."""
    if not raw_scores:
        return {}

    low, high = min(raw_scores.values()), max(raw_scores.values())
    if low == high:
        return {category_id: NEUTRAL_SCORE for category_id in raw_scores}

    return {
        category_id: round_half_up((raw - low) / (high - low) * 100.0, 1)
        for category_id, raw in raw_scores.items()
    }


def rank_scores(
    scores: Dict[int, float], names: Dict[int, str]
) -> List[Dict[str, Any]]:
    """Highest score first; ties keep category order. Rank is 1-based."""
    ordered = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return [
        {
            "category_id": category_id,
            "category_name": names.get(category_id, ""),
            "score": score,
            "rank": index + 1,
        }
        for index, (category_id, score) in enumerate(ordered)
    ]


# =====================================================================
# SERVICE CLASS
# =====================================================================


class OnboardingService:
    """One-time questionnaire that seeds a user's category priorities."""

    def __init__(self):
        self.crud = crud_onboarding
        self.min_answers = settings.ONBOARDING_MIN_ANSWERS

    @staticmethod
    def _language(language: Optional[str]) -> str:
        return (language or settings.DEFAULT_LANGUAGE).strip().lower()

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def list_questions(
        self, db: Session, language: Optional[str] = None, user_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Active questions for a language.

        Raises:
            OnboardingAlreadyCompletedError: If `user_id` already finished onboarding
        """
        lang = self._language(language)

        if user_id:
            user = crud_user.get(db, id=user_id)
            if user and user.onboarding_done:
                raise OnboardingAlreadyCompletedError()

        questions: List[OnboardingQuestion] = self.crud.get_active_questions(db, language=lang)
        return {"language": lang, "count": len(questions), "items": questions}

    # =====================================================================
    # SUBMISSION
    # =====================================================================

    def submit_answers(
        self,
        db: Session,
        user_id: int,
        language: Optional[str],
        answers: Iterable[Any],
        submitted_at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Score a questionnaire and store the user's priorities, exactly once.

        Everything happens in a single transaction with the user row locked;
        any failure rolls back the submission, answers and priorities.

        Raises:
            NotFoundError: Unknown user
            OnboardingAlreadyCompletedError: The user already submitted
            InsufficientAnswersError: Fewer than the minimum valid answers
            ValidationError: Two answers for the same question
        """
        lang = self._language(language)

        with row_locks.hold(user_key(user_id)):
            try:
                result = self._submit(db, user_id, lang, answers, submitted_at)
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(
            f"Onboarding completed for user {user_id} "
            f"({len(result['priorities'])} categories scored)"
        )
        return result

    def _submit(
        self,
        db: Session,
        user_id: int,
        language: str,
        raw_answers: Iterable[Any],
        submitted_at: Optional[datetime],
    ) -> Dict[str, Any]:
        user = crud_user.lock_for_update(db, id=user_id)
        if not user:
            raise NotFoundError("User not found")

        if user.onboarding_done:
            logger.warning(f"Onboarding resubmission rejected for user {user_id}")
            raise OnboardingAlreadyCompletedError()

        answers = parse_answers(raw_answers)
        if len(answers) < self.min_answers:
            raise InsufficientAnswersError(
                f"At least {self.min_answers} valid answers are required"
            )

        active_ids = self.crud.get_active_question_ids(
            db, question_ids=[question_id for question_id, _ in answers], language=language
        )
        answers = [(qid, value) for qid, value in answers if qid in active_ids]
        if len(answers) < self.min_answers:
            raise InsufficientAnswersError(
                f"At least {self.min_answers} answers to active questions are required"
            )

        answered = [question_id for question_id, _ in answers]
        if len(set(answered)) != len(answered):
            raise ValidationError("Each question can only be answered once")

        submission = self.crud.create_submission(
            db, user_id=user_id, submitted_at=submitted_at or local_now()
        )
        self.crud.bulk_create_answers(db, submission=submission, answers=answers)

        categories = crud_category.get_all(db)
        weights = self.crud.get_weights(db, question_ids=answered)
        raw_scores = raw_category_scores(answers, weights, [c.id for c in categories])
        scores = normalize_scores(raw_scores)

        crud_user_priorities.upsert_scores(db, user_id=user_id, scores=scores)
        crud_user.mark_onboarding_done(db, db_obj=user)

        names = {category.id: category.name for category in categories}
        return {
            "onboarding_done": True,
            "user_id": user_id,
            "priorities": rank_scores(scores, names),
        }


onboarding_service = OnboardingService()
