# =====================================================================
# SERVICE LAYER - services/user_goals.py
# =====================================================================

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session

from levelup.core.exceptions import ConflictError, NotFoundError, ValidationError
from levelup.core.locks import row_locks, user_key
from levelup.crud.user_goals import crud_user_goal
from levelup.crud.user_priorities import crud_user_priorities
from levelup.crud.users import crud_user
from levelup.models.goals import GoalStatus, UserGoal
from levelup.utils.cadence import EffectiveCadence, overrides_for_cadence, resolve_cadence
from levelup.utils.leveling import progress_from_total_xp, round_half_up
from levelup.utils.periods import PeriodWindow, period_key, resolve_period

logger = logging.getLogger(__name__)

# Multipliers for the user's first and second preferred categories
XP_MULTIPLIERS = (1.5, 1.25)


# =====================================================================
# EXCEPTIONS
# =====================================================================


class UserGoalNotFoundError(NotFoundError):
    """User goal not found."""
    code = "user_goal_not_found"


class PeriodQuotaReachedError(ConflictError):
    """Already completed for the current period."""
    code = "already_completed_this_period"


class ArchivedGoalError(ConflictError):
    """Goal is archived, reactivate it before changing its schedule."""
    code = "goal_archived"


class InvalidCadenceError(ValidationError):
    """Cadence is required (daily|weekly)."""
    code = "invalid_cadence"


# =====================================================================
# HELPERS
# =====================================================================


def xp_multiplier(ranked_category_ids: Sequence[int], category_id: Optional[int]) -> float:
    """x1.5 for the top category, x1.25 for the second, x1.0 otherwise."""
    if category_id is None:
        return 1.0
    for multiplier, ranked_id in zip(XP_MULTIPLIERS, ranked_category_ids):
        if ranked_id == category_id:
            return multiplier
    return 1.0


def _status_value(status: Any) -> str:
    return getattr(status, "value", status)


class UserGoalService:
    """Goal subscriptions, lazy period windows and XP-awarding completions."""

    def __init__(self):
        self.crud = crud_user_goal

    # =====================================================================
    # PERIOD STATE
    # =====================================================================

    def _period_state(
        self, db: Session, user_goal: UserGoal, now: datetime
    ) -> Tuple[EffectiveCadence, PeriodWindow, int]:
        """Effective cadence, current window and completions inside it."""
        cadence = resolve_cadence(user_goal, user_goal.template)
        window = resolve_period(
            now, cadence.frequency_type, cadence.frequency_interval, cadence.week_start
        )
        count = self.crud.count_completions_in_window(
            db, user_goal_id=user_goal.id, window=window
        )
        return cadence, window, count

    @staticmethod
    def _window_payload(
        cadence: EffectiveCadence, window: PeriodWindow, count: int
    ) -> Dict[str, Any]:
        return {
            "cadence": cadence.frequency_type,
            "period_start": window.start,
            "period_end": window.end,
            "completions_in_period": count,
            "can_complete": count < cadence.max_per_period,
        }

    def _get_owned(self, db: Session, user_id: int, user_goal_id: int, lock: bool = False) -> UserGoal:
        user_goal = self.crud.get(db, id=user_goal_id, user_id=user_id, lock=lock)
        if not user_goal:
            raise UserGoalNotFoundError()
        return user_goal

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def list_user_goals(
        self, db: Session, user_id: int, status: str, now: datetime
    ) -> List[Dict[str, Any]]:
        """A user's goals with their lazily computed period state."""
        status_filter = GoalStatus(status) if status in GoalStatus.__members__ else None
        goals = self.crud.list_for_user(db, user_id=user_id, status=status_filter)

        payload = []
        for user_goal in goals:
            template = user_goal.template
            cadence, window, count = self._period_state(db, user_goal, now)
            payload.append(
                {
                    "id": user_goal.id,
                    "user_id": user_goal.user_id,
                    "status": _status_value(user_goal.status),
                    "template_id": template.id,
                    "title": template.title,
                    "category_id": template.category_id,
                    "base_xp": template.base_xp,
                    "frequency_type_override": user_goal.frequency_type_override,
                    "frequency_interval_override": user_goal.frequency_interval_override,
                    "week_start_override": user_goal.week_start_override,
                    "max_per_period_override": user_goal.max_per_period_override,
                    "last_completed_at": user_goal.last_completed_at,
                    **cadence.as_dict(),
                    **self._window_payload(cadence, window, count),
                }
            )
        return payload

    # =====================================================================
    # SUBSCRIPTION
    # =====================================================================

    def add_user_goal(
        self, db: Session, user_id: int, template_id: int, cadence: Optional[str]
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Subscribe a user to a template with a daily or weekly cadence.

        Returns the payload and whether a new row was created. An archived
        subscription to the same template is reactivated instead.
        """
        overrides = overrides_for_cadence(cadence)
        if overrides is None:
            raise InvalidCadenceError()
        label = overrides["frequency_type_override"]

        with row_locks.hold(user_key(user_id)):
            try:
                if not crud_user.get(db, id=user_id):
                    raise NotFoundError("User not found")
                if not self.crud.get_template(db, template_id=template_id):
                    raise NotFoundError("Goal template not found")

                existing = self.crud.get_by_user_and_template(
                    db, user_id=user_id, template_id=template_id
                )
                if existing and existing.status == GoalStatus.active:
                    db.rollback()
                    return {
                        "id": existing.id,
                        "created": False,
                        "reactivated": False,
                        "message": "Already present and active",
                    }, False

                if existing:
                    self.crud.apply_overrides(db, db_obj=existing, overrides=overrides)
                    self.crud.set_status(db, db_obj=existing, status=GoalStatus.active)
                    db.commit()
                    logger.info(f"User {user_id} reactivated goal {existing.id} ({label})")
                    return {
                        "id": existing.id,
                        "created": False,
                        "reactivated": True,
                        "cadence": label,
                    }, False

                created = self.crud.create(
                    db, user_id=user_id, template_id=template_id, overrides=overrides
                )
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(f"User {user_id} subscribed to template {template_id} as goal {created.id} ({label})")
        return {"id": created.id, "created": True, "cadence": label}, True

    # =====================================================================
    # COMPLETION
    # =====================================================================

    def complete_goal(
        self, db: Session, user_id: int, user_goal_id: int, now: datetime
    ) -> Dict[str, Any]:
        """
        Record a completion and award XP, at most `max_per_period` times per window.

        The goal and user rows are locked for the whole transaction so a
        concurrent completion sees this one's insert before counting.

        Raises:
            UserGoalNotFoundError: Missing, foreign or archived goal
            PeriodQuotaReachedError: The current window's quota is used up
        """
        with row_locks.hold(user_key(user_id)):
            try:
                result = self._complete(db, user_id, user_goal_id, now)
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(
            f"User {user_id} completed goal {user_goal_id}: "
            f"+{result['awarded']} XP (total {result['new_xp']}, level {result['new_level']})"
        )
        return result

    def _complete(
        self, db: Session, user_id: int, user_goal_id: int, now: datetime
    ) -> Dict[str, Any]:
        user_goal = self.crud.get(
            db, id=user_goal_id, user_id=user_id, status=GoalStatus.active, lock=True
        )
        if not user_goal:
            raise UserGoalNotFoundError("User goal not found or inactive")

        template = user_goal.template
        cadence, window, count = self._period_state(db, user_goal, now)
        if count >= cadence.max_per_period:
            logger.warning(
                f"Completion rejected for goal {user_goal_id}: "
                f"{count}/{cadence.max_per_period} in period starting {window.start}"
            )
            raise PeriodQuotaReachedError()

        ranked = crud_user_priorities.get_ranked_category_ids(db, user_id)
        multiplier = xp_multiplier(ranked, template.category_id)
        xp_awarded = round_half_up(template.base_xp * multiplier)

        self.crud.create_completion(
            db,
            user_goal_id=user_goal.id,
            completed_at=now,
            xp_awarded=xp_awarded,
            period_key=period_key(now, cadence.frequency_type),
        )
        self.crud.mark_completed(db, db_obj=user_goal, completed_at=now)

        user = crud_user.lock_for_update(db, id=user_id)
        if not user:
            raise NotFoundError("User not found")
        crud_user.add_xp(db, db_obj=user, amount=xp_awarded)

        return {
            "ok": True,
            "awarded": xp_awarded,
            "new_xp": user.xp,
            "new_level": user.level,
            "next_eligible_at": window.end,
            "xp_progress": progress_from_total_xp(user.xp),
        }

    # =====================================================================
    # SCHEDULE & STATUS
    # =====================================================================

    def update_schedule(
        self, db: Session, user_id: int, user_goal_id: int, cadence: Optional[str], now: datetime
    ) -> Dict[str, Any]:
        """Switch a goal to the daily or weekly preset and report its window."""
        overrides = overrides_for_cadence(cadence)
        if overrides is None:
            raise InvalidCadenceError()

        with row_locks.hold(user_key(user_id)):
            try:
                user_goal = self._get_owned(db, user_id, user_goal_id, lock=True)
                if user_goal.status != GoalStatus.active:
                    raise ArchivedGoalError()

                self.crud.apply_overrides(db, db_obj=user_goal, overrides=overrides)
                effective, window, count = self._period_state(db, user_goal, now)
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(f"Goal {user_goal_id} of user {user_id} rescheduled to {effective.frequency_type}")
        return {
            "id": user_goal_id,
            "updated": True,
            "effective_frequency_type": effective.frequency_type,
            **self._window_payload(effective, window, count),
        }

    def archive_goal(self, db: Session, user_id: int, user_goal_id: int) -> Dict[str, Any]:
        with row_locks.hold(user_key(user_id)):
            try:
                user_goal = self._get_owned(db, user_id, user_goal_id, lock=True)
                self.crud.set_status(db, db_obj=user_goal, status=GoalStatus.archived)
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(f"Goal {user_goal_id} of user {user_id} archived")
        return {"id": user_goal_id, "status": GoalStatus.archived.value}

    def unarchive_goal(
        self, db: Session, user_id: int, user_goal_id: int, now: datetime
    ) -> Dict[str, Any]:
        """Reactivate an archived goal; an active goal just reports its window."""
        with row_locks.hold(user_key(user_id)):
            try:
                user_goal = self._get_owned(db, user_id, user_goal_id, lock=True)
                already_active = user_goal.status == GoalStatus.active
                if not already_active:
                    self.crud.set_status(db, db_obj=user_goal, status=GoalStatus.active)
                cadence, window, count = self._period_state(db, user_goal, now)
                db.commit()
            except Exception:
                db.rollback()
                raise

        if not already_active:
            logger.info(f"Goal {user_goal_id} of user {user_id} reactivated")
        return {
            "id": user_goal_id,
            "status": GoalStatus.active.value,
            "already_active": already_active,
            "reactivated": not already_active,
            **self._window_payload(cadence, window, count),
        }

    # =====================================================================
    # DELETE
    # =====================================================================

    def delete_goal(self, db: Session, user_id: int, user_goal_id: int) -> Dict[str, Any]:
        """Delete an archived goal and its completion history."""
        with row_locks.hold(user_key(user_id)):
            try:
                user_goal = self._get_owned(db, user_id, user_goal_id, lock=True)
                if user_goal.status != GoalStatus.archived:
                    raise ConflictError("Only archived goals can be deleted")
                self.crud.delete_with_completions(db, db_obj=user_goal)
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(f"Goal {user_goal_id} of user {user_id} deleted")
        return {"deleted": True}


user_goal_service = UserGoalService()
