import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .core.database import get_db
from .core.errors import TokenExpired, TokenInvalid, Unauthenticated
from .core.security import decode_access_token
from .schemas.auth import UserPublic
from .storage import DatabaseStorage

logger = logging.getLogger(__name__)

# auto_error is off so a missing header maps onto our own Unauthenticated
bearer_scheme = HTTPBearer(auto_error=False)


def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    return DatabaseStorage(db)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    storage: DatabaseStorage = Depends(get_storage),
) -> UserPublic:
    """Resolve the bearer token to an existing account or reject the request."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    try:
        account_id = decode_access_token(credentials.credentials)
    except TokenExpired:
        raise Unauthenticated("Invalid or expired token")
    except TokenInvalid:
        logger.info("Rejected malformed or forged bearer token")
        raise Unauthenticated("Invalid or expired token")

    user = storage.get_account_by_id(account_id)
    if not user:
        raise Unauthenticated("User not found")

    identity = UserPublic.model_validate(user)
    request.state.user = identity
    return identity
