from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from beauty_studio.core.config import settings
from beauty_studio.core.errors import AuthError
from beauty_studio.core.logger import logger
from beauty_studio.models.auth import AdminUser

ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user: AdminUser, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a token.
    Raises AuthError if it is invalid or expired.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Token expired")
    except JWTError as e:
        logger.warning(f"⚠️ JWT verification failed: {e}")
        raise AuthError("Invalid token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AdminUser:
    if credentials is None or not credentials.credentials:
        raise AuthError("Not authorized, no token")

    payload = decode_access_token(credentials.credentials)
    return AdminUser(
        id=payload.get("sub", ""),
        name=payload.get("name", ""),
        email=payload.get("email", ""),
        role=payload.get("role", "user"),
    )


async def require_admin(user: AdminUser = Depends(get_current_user)) -> AdminUser:
    if user.role != "admin":
        raise AuthError("Not authorized as an admin")
    return user
