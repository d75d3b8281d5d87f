# schemas/users.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, List, Optional
from datetime import datetime


# =====================================================================
# XP / LEVEL
# =====================================================================

class XpProgress(BaseModel):
    """Position of a cumulative XP total on the level curve."""
    level: int
    prev_total: int
    next_total: int
    current: int
    span: int
    percent: int


# =====================================================================
# USER
# =====================================================================

class UserProfileOut(BaseModel):
    id: int
    email: str
    username: Optional[str] = None
    xp: int
    level: int
    onboarding_done: bool
    xp_progress: XpProgress
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =====================================================================
# CATEGORIES & PRIORITIES
# =====================================================================

class CategoryOut(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserPriorityOut(BaseModel):
    category_id: int
    category_name: str
    score: float


class PriorityOrderRequest(BaseModel):
    """Categories from most to least important."""
    ordered_category_ids: List[Any] = Field(..., min_length=1)


class PriorityOrderResult(BaseModel):
    ok: bool = True
    count: int
