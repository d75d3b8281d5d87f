# levelup/models/__init__.py

from levelup.core.config import Base

# Import all models here so metadata.create_all and app-wide imports work
from .user import User
from .category import Category
from .onboarding import (
    OnboardingQuestion,
    OnboardingQuestionWeight,
    UserOnboardingSubmission,
    UserQuestionnaireAnswer,
)
from .user_priorities import UserPriority
from .goals import GoalTemplate, UserGoal, UserGoalCompletion, FrequencyType, GoalStatus

__all__ = [
    "Base",
    "User",
    "Category",
    "OnboardingQuestion",
    "OnboardingQuestionWeight",
    "UserOnboardingSubmission",
    "UserQuestionnaireAnswer",
    "UserPriority",
    "GoalTemplate",
    "UserGoal",
    "UserGoalCompletion",
    "FrequencyType",
    "GoalStatus",
]
