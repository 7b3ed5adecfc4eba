"""
JWT helpers

Tokens are issued by the identity provider; this service only needs to read
them. `create_access_token` exists for tooling and tests that must mint one.
"""
from datetime import timedelta
from typing import Optional
from uuid import UUID

from jose import jwt, JWTError

from friends_api.core.config import settings
from friends_api.utils.time_utils import utc_now


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token whose subject is the user id"""
    if expires_delta:
        expire = utc_now() + expires_delta
    else:
        expire = utc_now() + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a token, returning its claims or None if invalid"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
