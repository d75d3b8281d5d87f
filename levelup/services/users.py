# =====================================================================
# SERVICE LAYER - services/users.py
# =====================================================================

import logging
from typing import Any, Dict, Iterable, List
from sqlalchemy.orm import Session

from levelup.core.exceptions import NotFoundError, PermissionError, ValidationError
from levelup.core.locks import row_locks, user_key
from levelup.crud.categories import crud_category
from levelup.crud.user_priorities import crud_user_priorities
from levelup.crud.users import crud_user
from levelup.models.category import Category
from levelup.models.user import User
from levelup.utils.coerce import as_id
from levelup.utils.leveling import progress_from_total_xp

logger = logging.getLogger(__name__)

# Score given to the category at each rank (1-based); 0 past the end
SCORE_TABLE = [100, 90, 80, 70, 60, 50, 40, 35, 30, 25, 20, 15, 10, 5, 0]


def score_for_rank(rank: int) -> float:
    index = rank - 1
    if 0 <= index < len(SCORE_TABLE):
        return float(SCORE_TABLE[index])
    return 0.0


def sanitize_category_ids(raw_ids: Iterable[Any]) -> List[int]:
    """Positive integer ids in order, first occurrence wins."""
    seen = set()
    ordered = []
    for raw in raw_ids or []:
        category_id = as_id(raw)
        if category_id is None or category_id in seen:
            continue
        seen.add(category_id)
        ordered.append(category_id)
    return ordered


class UserService:
    """Service layer for profiles, category priorities and the category catalog."""

    def __init__(self):
        self.crud = crud_user

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_profile(self, db: Session, user_id: int) -> Dict[str, Any]:
        user = self.crud.get(db, id=user_id)
        if not user:
            raise NotFoundError("User not found")

        xp = user.xp or 0
        return {
            "id": user.id,
            "email": user.email,
            "username": user.username,
            "xp": xp,
            "level": user.level or 1,
            "onboarding_done": bool(user.onboarding_done),
            "xp_progress": progress_from_total_xp(xp),
            "created_at": user.created_at,
            "updated_at": user.updated_at,
        }

    def get_priorities(self, db: Session, user_id: int) -> List[Dict[str, Any]]:
        """Priorities with category names, highest score first."""
        return [
            {
                "category_id": priority.category_id,
                "category_name": priority.category.name,
                "score": priority.score,
            }
            for priority in crud_user_priorities.get_by_user_id(db, user_id=user_id)
        ]

    def list_categories(self, db: Session) -> List[Category]:
        return crud_category.get_all(db)

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def reorder_priorities(
        self,
        db: Session,
        user_id: int,
        ordered_category_ids: Iterable[Any],
        requesting_user: User,
    ) -> Dict[str, Any]:
        """
        Rescore a user's categories from an explicit ranking.

        Raises:
            PermissionError: If `requesting_user` is not the target user
            ValidationError: If no usable category id remains
        """
        if requesting_user.id != user_id:
            logger.warning(
                f"User {requesting_user.id} tried to reorder priorities of user {user_id}"
            )
            raise PermissionError("You can only reorder your own priorities")

        ordered = sanitize_category_ids(ordered_category_ids)
        known = {category.id for category in crud_category.get_all(db)}
        ordered = [category_id for category_id in ordered if category_id in known]
        if not ordered:
            raise ValidationError("No valid category id")

        scores = {
            category_id: score_for_rank(rank)
            for rank, category_id in enumerate(ordered, start=1)
        }

        with row_locks.hold(user_key(user_id)):
            try:
                crud_user_priorities.upsert_scores(db, user_id=user_id, scores=scores)
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(f"Priorities of user {user_id} reordered ({len(scores)} categories)")
        return {"ok": True, "count": len(scores)}


user_service = UserService()
