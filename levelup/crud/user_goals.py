# crud/user_goals.py
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session, joinedload

from levelup.models.goals import GoalTemplate, UserGoal, UserGoalCompletion, GoalStatus
from levelup.utils.periods import PeriodWindow


class CRUDUserGoal:
    """
    CRUD operations for UserGoal and its completions.

    Write methods only flush; the calling service owns the transaction.
    """

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(
        self,
        db: Session,
        *,
        id: int,
        user_id: int,
        status: Optional[GoalStatus] = None,
        lock: bool = False,
    ) -> Optional[UserGoal]:
        """Get a user's goal with its template, optionally row-locked."""
        query = (
            db.query(UserGoal)
            .options(joinedload(UserGoal.template, innerjoin=True))
            .filter(UserGoal.id == id, UserGoal.user_id == user_id)
        )
        if status is not None:
            query = query.filter(UserGoal.status == status)
        if lock:
            query = query.with_for_update(of=UserGoal).populate_existing()
        return query.first()

    def get_by_user_and_template(
        self, db: Session, *, user_id: int, template_id: int
    ) -> Optional[UserGoal]:
        return (
            db.query(UserGoal)
            .filter(UserGoal.user_id == user_id, UserGoal.template_id == template_id)
            .first()
        )

    def list_for_user(
        self, db: Session, *, user_id: int, status: Optional[GoalStatus] = None
    ) -> List[UserGoal]:
        """All goals of a user (optionally filtered by status), oldest first."""
        query = (
            db.query(UserGoal)
            .options(joinedload(UserGoal.template, innerjoin=True))
            .filter(UserGoal.user_id == user_id)
        )
        if status is not None:
            query = query.filter(UserGoal.status == status)
        return query.order_by(UserGoal.id.asc()).all()

    def get_template(self, db: Session, *, template_id: int) -> Optional[GoalTemplate]:
        return db.query(GoalTemplate).filter(GoalTemplate.id == template_id).first()

    # =====================================================================
    # CREATE / UPDATE OPERATIONS
    # =====================================================================

    def create(
        self, db: Session, *, user_id: int, template_id: int, overrides: Dict[str, Any]
    ) -> UserGoal:
        db_obj = UserGoal(
            user_id=user_id,
            template_id=template_id,
            status=GoalStatus.active,
            **overrides,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def apply_overrides(
        self, db: Session, *, db_obj: UserGoal, overrides: Dict[str, Any]
    ) -> UserGoal:
        for field, value in overrides.items():
            setattr(db_obj, field, value)
        db.flush()
        return db_obj

    def set_status(self, db: Session, *, db_obj: UserGoal, status: GoalStatus) -> UserGoal:
        db_obj.status = status
        db.flush()
        return db_obj

    def mark_completed(self, db: Session, *, db_obj: UserGoal, completed_at: datetime) -> UserGoal:
        db_obj.last_completed_at = completed_at
        db.flush()
        return db_obj

    # =====================================================================
    # COMPLETIONS
    # =====================================================================

    def count_completions_in_window(
        self, db: Session, *, user_goal_id: int, window: PeriodWindow
    ) -> int:
        """Completions with completed_at in [window.start, window.end)."""
        return (
            db.query(UserGoalCompletion)
            .filter(
                UserGoalCompletion.user_goal_id == user_goal_id,
                UserGoalCompletion.completed_at >= window.start,
                UserGoalCompletion.completed_at < window.end,
            )
            .count()
        )

    def create_completion(
        self,
        db: Session,
        *,
        user_goal_id: int,
        completed_at: datetime,
        xp_awarded: int,
        period_key: Optional[str],
    ) -> UserGoalCompletion:
        completion = UserGoalCompletion(
            user_goal_id=user_goal_id,
            completed_at=completed_at,
            xp_awarded=xp_awarded,
            period_key=period_key,
        )
        db.add(completion)
        db.flush()
        return completion

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    def delete_with_completions(self, db: Session, *, db_obj: UserGoal) -> None:
        db.query(UserGoalCompletion).filter(
            UserGoalCompletion.user_goal_id == db_obj.id
        ).delete(synchronize_session=False)
        db.delete(db_obj)
        db.flush()


crud_user_goal = CRUDUserGoal()
