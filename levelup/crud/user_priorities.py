# =====================================================================
# CRUD LAYER - crud/user_priorities.py
# =====================================================================

from typing import Dict, List
from sqlalchemy.orm import Session, joinedload

from levelup.models.user_priorities import UserPriority


class CRUDUserPriorities:
    """CRUD operations for UserPriority rows (one per user and category)."""

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_by_user_id(self, db: Session, user_id: int) -> List[UserPriority]:
        """Priorities for a user, highest score first (ties by id)."""
        return (
            db.query(UserPriority)
            .options(joinedload(UserPriority.category))
            .filter(UserPriority.user_id == user_id)
            .order_by(UserPriority.score.desc(), UserPriority.id.asc())
            .all()
        )

    def get_ranked_category_ids(self, db: Session, user_id: int) -> List[int]:
        """Category ids ordered from most to least preferred."""
        rows = (
            db.query(UserPriority.category_id)
            .filter(UserPriority.user_id == user_id)
            .order_by(UserPriority.score.desc(), UserPriority.id.asc())
            .all()
        )
        return [row.category_id for row in rows]

    # =====================================================================
    # UPSERT
    # =====================================================================

    def upsert_scores(
        self, db: Session, *, user_id: int, scores: Dict[int, float]
    ) -> List[UserPriority]:
        """
        Insert or overwrite the score of each (user, category) pair.

        Only flushes; the caller commits.
        """
        existing = {
            row.category_id: row
            for row in db.query(UserPriority).filter(UserPriority.user_id == user_id).all()
        }

        rows = []
        for category_id, score in scores.items():
            row = existing.get(category_id)
            if row is None:
                row = UserPriority(user_id=user_id, category_id=category_id, score=score)
                db.add(row)
            else:
                row.score = score
            rows.append(row)

        db.flush()
        return rows


crud_user_priorities = CRUDUserPriorities()
