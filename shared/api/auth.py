"""
Bearer token verification.

Tokens are issued elsewhere; this module only verifies them. Claims used:
  - sub: user id
  - is_guest: true for guest sessions, which may chat but not save anything

Usage:
    @router.get("/protected")
    def protected_endpoint(current_user: AuthenticatedUser = Depends(get_current_user)):
        return {"user_id": current_user.id}
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from config import get_settings

logger = logging.getLogger("shared.auth")

security = HTTPBearer(auto_error=False)


class AuthenticatedUser(BaseModel):
    id: str
    is_guest: bool = False


def verify_token(token: str) -> AuthenticatedUser:
    """
    Verify an access token and return the user it identifies.

    Raises:
        HTTPException: 401 if the signature, expiry or subject is invalid
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")

    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: no sub claim")

    return AuthenticatedUser(id=str(user_id), is_guest=bool(claims.get("is_guest", False)))


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """
    FastAPI dependency: a signed-in, non-guest user.
    Raises 401 if the token is missing or invalid, 403 for guests.
    """
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = verify_token(credentials.credentials)
    if user.is_guest:
        raise HTTPException(status_code=403, detail="Create an account to use this feature")
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthenticatedUser]:
    """
    Same as get_current_user but returns None instead of failing, and accepts guests.
    Use for endpoints that work for both signed-in and anonymous users.
    """
    if not credentials:
        return None

    try:
        return verify_token(credentials.credentials)
    except HTTPException as e:
        logger.info(f"Ignoring invalid optional token: {e.detail}")
        return None
