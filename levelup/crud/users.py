# crud/users.py
from typing import Optional
from sqlalchemy.orm import Session

from levelup.models.user import User
from levelup.utils.leveling import level_for_xp


class CRUDUser:
    """
    CRUD operations for User.

    Write methods only flush; the calling service owns the transaction.
    """

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(self, db: Session, id: int) -> Optional[User]:
        """Get user by ID."""
        return db.query(User).filter(User.id == id).first()

    def lock_for_update(self, db: Session, id: int) -> Optional[User]:
        """Get user by ID holding a row lock until the transaction ends."""
        return (
            db.query(User)
            .filter(User.id == id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def add_xp(self, db: Session, *, db_obj: User, amount: int) -> User:
        """Increase XP and recompute the cached level."""
        db_obj.xp = (db_obj.xp or 0) + amount
        db_obj.level = level_for_xp(db_obj.xp)
        db.flush()
        return db_obj

    def mark_onboarding_done(self, db: Session, *, db_obj: User) -> User:
        """One-way false -> true transition."""
        db_obj.onboarding_done = True
        db.flush()
        return db_obj


crud_user = CRUDUser()
