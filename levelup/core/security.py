# levelup/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from levelup.core.config import settings, get_db
from levelup.core.exceptions import UnauthorizedError
from levelup.crud.users import crud_user
from levelup.models.user import User


# =====================================================================
# JWT TOKEN CONFIGURATION
# =====================================================================

security = HTTPBearer(auto_error=False)


# =====================================================================
# TOKEN CREATION
# =====================================================================

def create_access_token(data: dict) -> str:
    """
    Create JWT access token.

    Args:
        data: Dictionary containing user data (typically {"sub": user_id})

    Returns:
        Encoded JWT access token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# =====================================================================
# TOKEN VERIFICATION
# =====================================================================

def verify_access_token(token: str) -> int:
    """
    Verify an access token and return the user id it carries.

    Raises:
        UnauthorizedError: If the token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Could not validate credentials")

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type. Expected access")

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Could not validate credentials")


# =====================================================================
# USER AUTHENTICATION DEPENDENCIES
# =====================================================================

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from the bearer token.

    Raises:
        UnauthorizedError: If the token is missing or invalid, or the user is gone
    """
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    user_id = verify_access_token(credentials.credentials)
    user = crud_user.get(db, id=user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    return user


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Get current user if a valid token is present, otherwise None.
    Used by endpoints that also accept an explicit user id.
    """
    if not credentials:
        return None

    try:
        user_id = verify_access_token(credentials.credentials)
    except UnauthorizedError:
        return None
    return crud_user.get(db, id=user_id)
