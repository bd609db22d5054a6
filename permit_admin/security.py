# permit_admin/security.py
"""
Signed access tokens for staff accounts.
The token's "sub" claim is the user id; the signature and "exp" are checked on every request.
"""

from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from permit_admin.config import settings


class InvalidTokenError(Exception):
    pass


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": user_id,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the user id carried by a valid token, or raise InvalidTokenError."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError("Token has no subject")
    return user_id
