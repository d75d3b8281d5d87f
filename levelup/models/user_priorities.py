# models/user_priorities.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from levelup.core.config import Base


class UserPriority(Base):
    __tablename__ = "user_priorities"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", name="uq_user_priority_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )

    # ---- Preference score (0..100, one decimal) ----
    score = Column(Float, nullable=False, default=50.0)

    # ---- Metadata ----
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    # ---- Relationship ----
    user = relationship("User", back_populates="priorities")
    category = relationship("Category")
