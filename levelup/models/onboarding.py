# models/onboarding.py
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
from levelup.core.config import Base


class OnboardingQuestion(Base):
    __tablename__ = "onboarding_questions"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False)
    question = Column(Text, nullable=False)
    language = Column(String(8), nullable=False, default="fr")
    enabled = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    weights = relationship(
        "OnboardingQuestionWeight", back_populates="question", cascade="all, delete-orphan"
    )


class OnboardingQuestionWeight(Base):
    __tablename__ = "onboarding_question_weights"
    __table_args__ = (
        UniqueConstraint("question_id", "category_id", name="uq_onb_weight_qc"),
    )

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(
        Integer, ForeignKey("onboarding_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    weight = Column(Numeric(5, 2), nullable=False, default=0)  # signed

    question = relationship("OnboardingQuestion", back_populates="weights")
    category = relationship("Category")


class UserOnboardingSubmission(Base):
    __tablename__ = "user_onboarding_submissions"

    # Append-only: one row per completed questionnaire
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    submitted_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="onboarding_submissions")
    answers = relationship(
        "UserQuestionnaireAnswer", back_populates="submission", cascade="all, delete-orphan"
    )


class UserQuestionnaireAnswer(Base):
    __tablename__ = "user_questionnaire_answers"
    __table_args__ = (
        UniqueConstraint("submission_id", "question_id", name="uq_uqa_submission_question"),
        CheckConstraint("answer_value BETWEEN 1 AND 5", name="ck_uqa_answer_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(
        Integer, ForeignKey("user_onboarding_submissions.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(
        Integer, ForeignKey("onboarding_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    answer_value = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    submission = relationship("UserOnboardingSubmission", back_populates="answers")
