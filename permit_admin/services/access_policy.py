# permit_admin/services/access_policy.py
"""
Who may see and change which lots, permits and users.

Admins see every lot; everyone else sees only their assigned lots.
Editing needs editor-or-better AND visibility of the lot concerned.
A missing user (None) is unauthenticated and is denied everything.
All functions are pure predicates.
"""

from typing import Optional
from permit_admin.schemas.user import Role, User


def has_minimum_role(user: Optional[User], required) -> bool:
    if user is None:
        return False
    return Role(user.role).rank >= Role(required).rank


def can_view_lot(user: Optional[User], lot_id: str) -> bool:
    if user is None:
        return False
    return user.role == Role.ADMIN or lot_id in user.assigned_lots


def can_view_permit(user: Optional[User], permit) -> bool:
    return can_view_lot(user, permit.lot_id)


def can_edit(user: Optional[User]) -> bool:
    """Role-level edit right only. Pair with can_view_lot for a concrete lot."""
    return has_minimum_role(user, Role.EDITOR)


def can_edit_lot(user: Optional[User], lot_id: str) -> bool:
    return can_edit(user) and can_view_lot(user, lot_id)


def can_edit_permit(user: Optional[User], permit) -> bool:
    return can_edit_lot(user, permit.lot_id)


def can_manage_users(user: Optional[User]) -> bool:
    return user is not None and user.role == Role.ADMIN


def can_manage_lots(user: Optional[User]) -> bool:
    return user is not None and user.role == Role.ADMIN


def visible_lot_ids(user: Optional[User]) -> Optional[set[str]]:
    """Lot filter for listings: None means unrestricted (admin)."""
    if user is None:
        return set()
    if user.role == Role.ADMIN:
        return None
    return set(user.assigned_lots)
