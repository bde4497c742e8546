"""
Security helpers for the Taskboard API
Password hashing and JWT access tokens
"""
import base64
import hashlib
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from ..config import settings
from .errors import InvalidTokenException, TokenExpiredException
from .timeutils import utcnow


def _prehash(password: str) -> bytes:
    # bcrypt only reads 72 bytes; base64(sha256) keeps long passwords meaningful
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_prehash(password), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a signed access token for a user.

    The payload carries only the subject and expiry.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = utcnow() + expires_delta
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    """
    Verify a token and return the user id it was issued for.

    Raises:
        TokenExpiredException: If the token's expiry has passed
        InvalidTokenException: For any other verification failure
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        raise InvalidTokenException()

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise InvalidTokenException()


__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
]
