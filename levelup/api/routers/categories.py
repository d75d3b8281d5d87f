# =====================================================================
# ROUTER - api/routers/categories.py
# =====================================================================

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from levelup.core.config import get_db
from levelup.schemas.users import CategoryOut
from levelup.services.users import user_service

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=List[CategoryOut], summary="List categories")
def list_categories(db: Session = Depends(get_db)):
    """Static category catalog used by priorities and goal templates."""
    return user_service.list_categories(db=db)
