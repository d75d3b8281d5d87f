# =====================================================================
# ROUTER - api/routers/user_goals.py
# =====================================================================

from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from levelup.core.clock import get_now
from levelup.core.config import get_db
from levelup.schemas.user_goals import (
    AddUserGoalRequest,
    AddUserGoalResult,
    ArchiveResult,
    CompletionResult,
    DeleteResult,
    ScheduleRequest,
    ScheduleResult,
    UnarchiveResult,
    UserGoalOut,
)
from levelup.services.user_goals import user_goal_service

router = APIRouter(prefix="/users/{user_id}/user-goals", tags=["User Goals"])


# =====================================================================
# LIST & SUBSCRIBE
# =====================================================================


@router.get("", response_model=List[UserGoalOut], summary="List my goals")
def list_user_goals(
    user_id: int,
    status_filter: str = Query("active", alias="status", description="active | archived | all"),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Goals with their current period window.

    `can_complete` tells whether another completion fits in the window.
    Any status other than active or archived lists every goal.
    """
    return user_goal_service.list_user_goals(
        db=db, user_id=user_id, status=status_filter, now=now
    )


@router.post("", response_model=AddUserGoalResult, summary="Add a goal")
def add_user_goal(
    user_id: int,
    payload: AddUserGoalRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Subscribe to a goal template with a `daily` or `weekly` cadence.

    Returns 201 when created, 200 when an existing goal was reused.
    """
    result, created = user_goal_service.add_user_goal(
        db=db, user_id=user_id, template_id=payload.template_id, cadence=payload.cadence
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return result


# =====================================================================
# COMPLETION
# =====================================================================


@router.patch(
    "/{user_goal_id}/complete",
    response_model=CompletionResult,
    summary="Complete a goal",
)
def complete_goal(
    user_id: int,
    user_goal_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Record a completion and award XP.

    **XP:** base XP of the template, x1.5 if its category is the user's top
    priority, x1.25 if second. Returns 409 once the period quota is reached.
    """
    return user_goal_service.complete_goal(
        db=db, user_id=user_id, user_goal_id=user_goal_id, now=now
    )


# =====================================================================
# SCHEDULE & STATUS
# =====================================================================


@router.patch(
    "/{user_goal_id}/schedule",
    response_model=ScheduleResult,
    summary="Change goal cadence",
)
def update_schedule(
    user_id: int,
    user_goal_id: int,
    payload: ScheduleRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return user_goal_service.update_schedule(
        db=db, user_id=user_id, user_goal_id=user_goal_id, cadence=payload.cadence, now=now
    )


@router.patch(
    "/{user_goal_id}/archive",
    response_model=ArchiveResult,
    summary="Archive a goal",
)
def archive_goal(user_id: int, user_goal_id: int, db: Session = Depends(get_db)):
    return user_goal_service.archive_goal(db=db, user_id=user_id, user_goal_id=user_goal_id)


@router.patch(
    "/{user_goal_id}/unarchive",
    response_model=UnarchiveResult,
    summary="Reactivate a goal",
)
def unarchive_goal(
    user_id: int,
    user_goal_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return user_goal_service.unarchive_goal(
        db=db, user_id=user_id, user_goal_id=user_goal_id, now=now
    )


@router.delete(
    "/{user_goal_id}",
    response_model=DeleteResult,
    summary="Delete an archived goal",
)
def delete_goal(user_id: int, user_goal_id: int, db: Session = Depends(get_db)):
    """Delete an archived goal and its completion history. Active goals return 409."""
    return user_goal_service.delete_goal(db=db, user_id=user_id, user_goal_id=user_goal_id)
