# =====================================================================
# ROUTER - api/routers/users.py
# =====================================================================

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from levelup.core.config import get_db
from levelup.core.security import get_current_user
from levelup.models.user import User
from levelup.schemas.users import (
    PriorityOrderRequest,
    PriorityOrderResult,
    UserPriorityOut,
    UserProfileOut,
)
from levelup.services.users import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/{user_id}", response_model=UserProfileOut, summary="Get user profile")
def get_profile(user_id: int, db: Session = Depends(get_db)):
    """Profile with XP total, level and progress toward the next level."""
    return user_service.get_profile(db=db, user_id=user_id)


@router.get(
    "/{user_id}/priorities",
    response_model=List[UserPriorityOut],
    summary="Get user priorities",
)
def get_priorities(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_priorities(db=db, user_id=user_id)


@router.put(
    "/{user_id}/priorities/order",
    response_model=PriorityOrderResult,
    summary="Reorder my priorities",
)
def reorder_priorities(
    user_id: int,
    payload: PriorityOrderRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Rescore categories from most to least important.

    Ranks map to scores 100, 90, 80, 70, 60, 50, 40, 35, 30, 25, 20, 15, 10, 5,
    then 0. Invalid and repeated ids are skipped.
    """
    return user_service.reorder_priorities(
        db=db,
        user_id=user_id,
        ordered_category_ids=payload.ordered_category_ids,
        requesting_user=current_user,
    )
