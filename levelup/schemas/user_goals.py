# schemas/user_goals.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from levelup.schemas.users import XpProgress


# =====================================================================
# REQUESTS
# =====================================================================

class AddUserGoalRequest(BaseModel):
    template_id: int = Field(..., gt=0)
    cadence: Optional[str] = Field(None, description="daily | weekly")


class ScheduleRequest(BaseModel):
    cadence: Optional[str] = Field(None, description="daily | weekly")


# =====================================================================
# RESPONSES
# =====================================================================

class PeriodState(BaseModel):
    """Window state of a goal at request time."""
    period_start: datetime
    period_end: datetime
    completions_in_period: int
    can_complete: bool


class UserGoalOut(PeriodState):
    id: int
    user_id: int
    status: str

    # Template
    template_id: int
    title: str
    category_id: Optional[int] = None
    base_xp: int

    # Stored overrides
    frequency_type_override: Optional[str] = None
    frequency_interval_override: Optional[int] = None
    week_start_override: Optional[int] = None
    max_per_period_override: Optional[int] = None

    # Effective cadence
    effective_frequency_type: str
    effective_frequency_interval: int
    effective_week_start: int
    effective_max_per_period: int
    cadence: str

    last_completed_at: Optional[datetime] = None


class AddUserGoalResult(BaseModel):
    id: int
    created: bool
    reactivated: bool = False
    cadence: Optional[str] = None
    message: Optional[str] = None


class ScheduleResult(PeriodState):
    id: int
    updated: bool
    cadence: str
    effective_frequency_type: str


class ArchiveResult(BaseModel):
    id: int
    status: str


class UnarchiveResult(PeriodState):
    id: int
    status: str
    cadence: str
    already_active: bool = False
    reactivated: bool = False


class CompletionResult(BaseModel):
    ok: bool = True
    awarded: int
    new_xp: int
    new_level: int
    next_eligible_at: datetime
    xp_progress: XpProgress


class DeleteResult(BaseModel):
    deleted: bool
