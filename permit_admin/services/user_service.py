# permit_admin/services/user_service.py
"""Admin-only user management: roles and lot assignments."""

from permit_admin.errors import ForbiddenError
from permit_admin.schemas.user import User, UserCreate, UserUpdate
from permit_admin.services.access_policy import can_manage_users
from permit_admin.services.repository import UserRepository
from permit_admin.utils.logger import get_logger

logger = get_logger(__name__)


def _require_user_admin(actor: User, action: str):
    if not can_manage_users(actor):
        logger.warning(f"[USERS] User {actor.id if actor else None} denied {action}")
        raise ForbiddenError("Admin privileges required to manage users")


def list_users(actor: User, users: UserRepository) -> list[User]:
    _require_user_admin(actor, "user listing")
    return users.list_users()


def update_user(actor: User, user_id: str, patch: UserUpdate, users: UserRepository) -> User:
    _require_user_admin(actor, f"edit of user {user_id}")
    user = users.update(user_id, patch)
    logger.info(f"[USERS] {user.email} now role={user.role.value} lots={sorted(user.assigned_lots)}")
    return user


def provision_user(data: UserCreate, users: UserRepository) -> User:
    """Account provisioning (setup scripts, sign-up flow). No actor check."""
    user = users.create(data)
    logger.info(f"[USERS] Provisioned {user.email} as {user.role.value}")
    return user
