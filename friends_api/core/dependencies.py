"""
FastAPI dependencies: identity resolution and store access
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from friends_api.core.exceptions import Unauthenticated
from friends_api.core.security import decode_access_token
from friends_api.database import get_db
from friends_api.storage import SQLAlchemyStore, Store

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> UUID:
    """
    Resolve the authenticated user id from the Bearer token.

    Raises Unauthenticated when the header is missing, the token does not
    verify, or its subject is not a user id.
    """
    if credentials is None:
        raise Unauthenticated()

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        logger.info("Rejected request with invalid access token")
        raise Unauthenticated("Invalid or expired token")

    try:
        return UUID(payload["sub"])
    except (ValueError, TypeError):
        raise Unauthenticated("Invalid token subject")


def get_store(db: Session = Depends(get_db)) -> Store:
    """Store bound to the request's database session"""
    return SQLAlchemyStore(db)
