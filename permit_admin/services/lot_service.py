# permit_admin/services/lot_service.py
"""
Lot management. Creating, editing and deleting lots is admin-only;
listing returns the lots the user is allowed to see.
A lot still referenced by permits cannot be deleted.
"""

from permit_admin.errors import ForbiddenError, LotInUseError
from permit_admin.schemas.lot import Lot, LotCreate, LotUpdate
from permit_admin.schemas.user import User
from permit_admin.services.access_policy import can_manage_lots, can_view_lot
from permit_admin.services.repository import LotRepository, PermitRepository
from permit_admin.utils.logger import get_logger

logger = get_logger(__name__)


def _require_lot_admin(actor: User, action: str):
    if not can_manage_lots(actor):
        logger.warning(f"[LOTS] User {actor.id if actor else None} denied {action}")
        raise ForbiddenError("Admin privileges required to manage lots")


def list_visible_lots(actor: User, lots: LotRepository) -> list[Lot]:
    return [lot for lot in lots.list_lots() if can_view_lot(actor, lot.id)]


def lot_names(lots: LotRepository) -> dict:
    return {lot.id: lot.name for lot in lots.list_lots()}


def create_lot(actor: User, data: LotCreate, lots: LotRepository) -> Lot:
    _require_lot_admin(actor, "lot create")
    lot = lots.create(data)
    logger.info(f"[LOTS] Created {lot.name} ({lot.available_spots}/{lot.total_spots})")
    return lot


def update_lot(actor: User, lot_id: str, patch: LotUpdate, lots: LotRepository) -> Lot:
    _require_lot_admin(actor, f"edit of lot {lot_id}")
    lot = lots.update(lot_id, patch)
    logger.info(f"[LOTS] Updated {lot.name} ({lot.available_spots}/{lot.total_spots})")
    return lot


def delete_lot(actor: User, lot_id: str, lots: LotRepository, permits: PermitRepository) -> None:
    _require_lot_admin(actor, f"delete of lot {lot_id}")
    lot = lots.get_by_id(lot_id)
    referencing = permits.list_permits(lot_ids={lot_id})
    if referencing:
        logger.warning(f"[LOTS] Delete of {lot.name} blocked: {len(referencing)} permit(s) reference it")
        raise LotInUseError(lot_id, len(referencing))
    lots.delete(lot_id)
    logger.info(f"[LOTS] Deleted {lot.name}")
