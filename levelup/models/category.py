# models/category.py
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from levelup.core.config import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)

    goal_templates = relationship("GoalTemplate", back_populates="category")
