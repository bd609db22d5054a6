# permit_admin/dependencies.py
"""
FastAPI dependencies: per-request repositories and the acting user.
Tests swap the repositories for in-memory ones via app.dependency_overrides.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from permit_admin.database import get_db
from permit_admin.errors import NotFoundError
from permit_admin.schemas.user import User
from permit_admin.security import InvalidTokenError, decode_access_token
from permit_admin.services.repository import LotRepository, PermitRepository, UserRepository
from permit_admin.services.sql_repository import SqlLotRepository, SqlPermitRepository, SqlUserRepository
from permit_admin.utils.logger import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_permit_repo(db: Session = Depends(get_db)) -> PermitRepository:
    return SqlPermitRepository(db)


def get_lot_repo(db: Session = Depends(get_db)) -> LotRepository:
    return SqlLotRepository(db)


def get_user_repo(db: Session = Depends(get_db)) -> UserRepository:
    return SqlUserRepository(db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    users: UserRepository = Depends(get_user_repo),
) -> User:
    """Resolve the bearer token to a staff account, or 401."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    try:
        user_id = decode_access_token(credentials.credentials)
    except InvalidTokenError as exc:
        logger.warning(f"[AUTH] Rejected token: {exc}")
        raise unauthorized

    try:
        return users.get_by_id(user_id)
    except NotFoundError:
        logger.warning(f"[AUTH] Token for unknown user {user_id}")
        raise unauthorized
