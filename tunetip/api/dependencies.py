# ============================================================================
# FILE: tunetip/api/dependencies.py
# ============================================================================
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from tunetip.db.session import get_db
from tunetip.config import settings
from tunetip.core.exceptions import ForbiddenError, UnauthorizedError
from tunetip.core.security import decode_access_token
from tunetip.db.models.user import User
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Tokens are issued by the platform's auth service; tokenUrl only feeds the OpenAPI docs
bearer_token = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

def _user_from_token(db: Session, token: str) -> Optional[User]:
    """The user named by the token's `sub` claim, or None for bad tokens and unknown users"""
    try:
        claims = decode_access_token(token)
    except UnauthorizedError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None

    username = claims.get("sub")
    if not username:
        return None
    return db.query(User).filter(User.username == username).first()

def get_current_user(
    token: Optional[str] = Depends(bearer_token),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Caller identity for routes that also serve anonymous viewers"""
    return _user_from_token(db, token) if token else None

def require_current_user(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    """Caller identity for mutating routes; 401 when missing or invalid"""
    if current_user is None:
        raise UnauthorizedError("Not authenticated")
    return current_user

def require_operator(
    current_user: User = Depends(require_current_user)
) -> User:
    """Caller identity for system-wide jobs; only usernames in OPERATOR_USERNAMES pass"""
    if current_user.username not in settings.OPERATOR_USERNAMES:
        raise ForbiddenError("Operator access required")
    return current_user
