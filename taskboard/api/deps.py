"""
Request dependencies for the Taskboard API
Binds the acting user and the storage unit of work to each request
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..database.database import get_store
from ..utils.errors import UnauthenticatedException
from ..utils.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> int:
    """
    Verify the bearer token and return the acting user's id.

    No storage access happens here; ledgers scope every query by this id.

    Raises:
        UnauthenticatedException: No bearer token on the request
        TokenExpiredException: Token is past its expiry
        InvalidTokenException: Token failed verification
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedException()
    return decode_access_token(credentials.credentials)


__all__ = ["bearer_scheme", "get_current_user_id", "get_store"]
