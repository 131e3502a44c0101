"""FastAPI dependencies for database sessions and authentication."""

import logging
from typing import Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User
from ..services.access_service import AccessService
from .config import settings
from .database import get_db
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def decode_bearer_token(authorization: Optional[str]) -> str:
    """
    Validate a Bearer token and return its subject.

    Args:
        authorization: Raw Authorization header value

    Returns:
        str: The external identity carried in the ``sub`` claim

    Raises:
        AuthenticationError: If the header is missing, malformed, or the token is invalid
    """
    if not authorization:
        raise AuthenticationError("Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")

    try:
        # exp is verified by PyJWT when present
        payload = jwt.decode(token, settings.bearer_token_secret, algorithms=["HS256"])
    except PyJWTError as e:
        logger.info("Token validation failed", extra={"error": str(e)})
        raise AuthenticationError(f"Token validation failed: {e!s}")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")
    return subject


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Authentication dependency resolving the Bearer token to a registered user.

    Raises:
        AuthenticationError: If the token is invalid or its subject is unknown
    """
    external_id = decode_bearer_token(authorization)
    return await AccessService(db).require_user(external_id)

