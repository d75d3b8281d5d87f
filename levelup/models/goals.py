# models/goals.py

import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Text, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint,
    Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from levelup.core.config import Base


class FrequencyType(str, enum.Enum):
    once = "once"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    custom = "custom"


class GoalStatus(str, enum.Enum):
    active = "active"
    archived = "archived"


class GoalTemplate(Base):
    __tablename__ = "goal_templates"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    base_xp = Column(Integer, nullable=False, default=40)

    # ---- Default cadence ----
    frequency_type = Column(String(20), nullable=False, default=FrequencyType.daily.value)
    frequency_interval = Column(Integer, nullable=False, default=1)
    week_start = Column(Integer, nullable=False, default=1)  # 1 = Monday
    max_per_period = Column(Integer, nullable=False, default=1)

    enabled = Column(Boolean, nullable=False, default=True)

    category = relationship("Category", back_populates="goal_templates")
    user_goals = relationship("UserGoal", back_populates="template")


class UserGoal(Base):
    __tablename__ = "user_goals"
    __table_args__ = (
        UniqueConstraint("user_id", "template_id", name="uq_user_template"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("goal_templates.id"), nullable=False)
    status = Column(SqlEnum(GoalStatus), nullable=False, default=GoalStatus.active)

    # ---- Cadence overrides (NULL = inherit from template) ----
    frequency_type_override = Column(String(20), nullable=True)
    frequency_interval_override = Column(Integer, nullable=True)
    week_start_override = Column(Integer, nullable=True)
    max_per_period_override = Column(Integer, nullable=True)

    last_completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # ---- Relationships ----
    user = relationship("User", back_populates="goals")
    template = relationship("GoalTemplate", back_populates="user_goals")
    completions = relationship("UserGoalCompletion", back_populates="user_goal")


class UserGoalCompletion(Base):
    __tablename__ = "user_goal_completions"

    # Append-only event log
    id = Column(Integer, primary_key=True, index=True)
    user_goal_id = Column(Integer, ForeignKey("user_goals.id"), nullable=False, index=True)
    completed_at = Column(DateTime, nullable=False, index=True)
    xp_awarded = Column(Integer, nullable=False)
    period_key = Column(String(32), nullable=True)  # informational only, not used for gating

    user_goal = relationship("UserGoal", back_populates="completions")
