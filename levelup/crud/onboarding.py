# crud/onboarding.py
from datetime import datetime
from typing import Iterable, List, Set, Tuple
from sqlalchemy.orm import Session

from levelup.models.onboarding import (
    OnboardingQuestion,
    OnboardingQuestionWeight,
    UserOnboardingSubmission,
    UserQuestionnaireAnswer,
)


class CRUDOnboarding:
    """
    CRUD operations for the onboarding questionnaire.

    Write methods only flush; the calling service owns the transaction.
    """

    # =====================================================================
    # QUESTIONS
    # =====================================================================

    def get_active_questions(self, db: Session, *, language: str) -> List[OnboardingQuestion]:
        """Enabled questions for a language, in display order."""
        return (
            db.query(OnboardingQuestion)
            .filter(
                OnboardingQuestion.enabled.is_(True),
                OnboardingQuestion.language == language,
            )
            .order_by(OnboardingQuestion.sort_order.asc(), OnboardingQuestion.id.asc())
            .all()
        )

    def get_active_question_ids(
        self, db: Session, *, question_ids: Iterable[int], language: str
    ) -> Set[int]:
        """Subset of `question_ids` that are enabled in `language`."""
        ids = set(question_ids)
        if not ids:
            return set()
        rows = (
            db.query(OnboardingQuestion.id)
            .filter(
                OnboardingQuestion.id.in_(ids),
                OnboardingQuestion.enabled.is_(True),
                OnboardingQuestion.language == language,
            )
            .all()
        )
        return {row.id for row in rows}

    def get_weights(
        self, db: Session, *, question_ids: Iterable[int]
    ) -> List[OnboardingQuestionWeight]:
        """(question -> category, weight) pairs for the given questions."""
        ids = set(question_ids)
        if not ids:
            return []
        return (
            db.query(OnboardingQuestionWeight)
            .filter(OnboardingQuestionWeight.question_id.in_(ids))
            .all()
        )

    # =====================================================================
    # SUBMISSIONS
    # =====================================================================

    def create_submission(
        self, db: Session, *, user_id: int, submitted_at: datetime
    ) -> UserOnboardingSubmission:
        submission = UserOnboardingSubmission(user_id=user_id, submitted_at=submitted_at)
        db.add(submission)
        db.flush()
        return submission

    def bulk_create_answers(
        self,
        db: Session,
        *,
        submission: UserOnboardingSubmission,
        answers: List[Tuple[int, int]],
    ) -> List[UserQuestionnaireAnswer]:
        """One answer row per (question_id, value) entry."""
        rows = [
            UserQuestionnaireAnswer(
                submission_id=submission.id,
                user_id=submission.user_id,
                question_id=question_id,
                answer_value=value,
            )
            for question_id, value in answers
        ]
        db.add_all(rows)
        db.flush()
        return rows

    def count_submissions(self, db: Session, *, user_id: int) -> int:
        return (
            db.query(UserOnboardingSubmission)
            .filter(UserOnboardingSubmission.user_id == user_id)
            .count()
        )


crud_onboarding = CRUDOnboarding()
