# ============================================================================
# FILE: tunetip/core/security.py
# ============================================================================
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from tunetip.config import settings
from tunetip.core.exceptions import UnauthorizedError

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed JWT carrying `data` (the `sub` claim is the username)"""
    to_encode = data.copy()
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str) -> dict:
    """Decode and verify a JWT, raising UnauthorizedError when it is invalid or expired"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise UnauthorizedError("Could not validate credentials") from e
