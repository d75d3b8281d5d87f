# levelup/schemas/__init__.py

from .users import (
    XpProgress,
    UserProfileOut,
    CategoryOut,
    UserPriorityOut,
    PriorityOrderRequest,
    PriorityOrderResult,
)
from .onboarding import (
    OnboardingQuestionOut,
    OnboardingQuestionList,
    OnboardingAnswerIn,
    OnboardingSubmitRequest,
    CategoryScore,
    OnboardingResult,
)
from .user_goals import (
    AddUserGoalRequest,
    ScheduleRequest,
    PeriodState,
    UserGoalOut,
    AddUserGoalResult,
    ScheduleResult,
    ArchiveResult,
    UnarchiveResult,
    CompletionResult,
    DeleteResult,
)


__all__ = [
    # Users
    "XpProgress", "UserProfileOut", "CategoryOut", "UserPriorityOut",
    "PriorityOrderRequest", "PriorityOrderResult",

    # Onboarding
    "OnboardingQuestionOut", "OnboardingQuestionList", "OnboardingAnswerIn",
    "OnboardingSubmitRequest", "CategoryScore", "OnboardingResult",

    # User goals
    "AddUserGoalRequest", "ScheduleRequest", "PeriodState",
    "UserGoalOut", "AddUserGoalResult", "ScheduleResult", "ArchiveResult",
    "UnarchiveResult", "CompletionResult", "DeleteResult",
]
