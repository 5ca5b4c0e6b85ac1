"""
Bearer-token identity utilities.

Tokens are issued by the external identity provider with the shared
SECRET_KEY; the ``sub`` claim is the opaque user id that scopes every record.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from ..config import settings
from ..exceptions import Unauthenticated


logger = logging.getLogger(__name__)

# HTTP Bearer for JWT; missing headers are reported as Unauthenticated below
security = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token for a user id."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"sub": str(user_id), "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> str:
    """Decode and validate a JWT token, returning its user id."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug("Rejected bearer token: %s", e)
        raise Unauthenticated("Could not validate credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid token payload")

    return str(user_id)


def ensure_authenticated(user_id: Optional[str]) -> str:
    """Guard used at the start of every service operation."""
    if not user_id:
        raise Unauthenticated()
    return user_id


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Get the authenticated user id for the current request."""
    if credentials is None:
        raise Unauthenticated()

    return decode_token(credentials.credentials)
