# models/user.py

from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Integer
from sqlalchemy.orm import relationship
from levelup.core.config import Base


class User(Base):
    __tablename__ = "users"

    # ---- Base fields ----
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)

    # ---- Progression ----
    xp = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)  # cached, derived from xp
    onboarding_done = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # ---- Relationships ----
    goals = relationship("UserGoal", back_populates="user", cascade="all, delete-orphan")
    priorities = relationship("UserPriority", back_populates="user", cascade="all, delete-orphan")
    onboarding_submissions = relationship(
        "UserOnboardingSubmission", back_populates="user", cascade="all, delete-orphan"
    )
