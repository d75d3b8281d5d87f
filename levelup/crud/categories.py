# crud/categories.py
from typing import List
from sqlalchemy.orm import Session

from levelup.models.category import Category


class CRUDCategory:
    """Read access to the static category catalog."""

    def get_all(self, db: Session) -> List[Category]:
        return db.query(Category).order_by(Category.id.asc()).all()


crud_category = CRUDCategory()
