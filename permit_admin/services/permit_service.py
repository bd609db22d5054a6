# permit_admin/services/permit_service.py
"""
Access-checked permit operations used by the permits router.
Every call runs access_policy before touching the repository.
"""

import random
from datetime import date, datetime, timedelta
from typing import Optional

from permit_admin.config import settings
from permit_admin.errors import ForbiddenError, UniqueConstraintViolation
from permit_admin.schemas.permit import Permit, PermitCreate, PermitOut, PermitUpdate, validate_occupant_status
from permit_admin.schemas.user import User
from permit_admin.services.access_policy import (
    can_edit_lot, can_edit_permit, can_view_permit, visible_lot_ids,
)
from permit_admin.services import permit_lifecycle
from permit_admin.services.permit_lifecycle import days_until_expiry, evaluate_status
from permit_admin.services.repository import LotRepository, PermitRepository
from permit_admin.utils.logger import get_logger

logger = get_logger(__name__)


def generate_permit_number(today: Optional[date] = None) -> str:
    """Human-readable number in the PMT-NNN-YYYY form."""
    year = (today or permit_lifecycle.utc_now().date()).year
    return f"PMT-{random.randint(0, 999):03d}-{year}"


def with_status(permit: Permit, now: Optional[datetime] = None) -> PermitOut:
    now = now or permit_lifecycle.utc_now()
    return PermitOut(
        **permit.model_dump(),
        status=evaluate_status(permit, now),
        days_until_expiry=days_until_expiry(permit.expiration_date, now),
    )


def matches_search(permit: Permit, term: str, lot_names: Optional[dict] = None) -> bool:
    term = term.lower()
    lot_name = (lot_names or {}).get(permit.lot_id, "")
    return any(term in value.lower() for value in (
        permit.permit_number,
        permit.holder_name,
        permit.vehicle.license_plate,
        lot_name,
    ))


def list_visible_permits(actor: User, repo: PermitRepository,
                         search: Optional[str] = None, lot_names: Optional[dict] = None) -> list[Permit]:
    permits = repo.list_permits(lot_ids=visible_lot_ids(actor))
    if search:
        permits = [p for p in permits if matches_search(p, search, lot_names)]
    return permits


def get_permit(actor: User, permit_id: str, repo: PermitRepository) -> Permit:
    permit = repo.get_by_id(permit_id)
    if not can_view_permit(actor, permit):
        logger.warning(f"[PERMITS] User {actor.id} denied read of permit {permit_id}")
        raise ForbiddenError("You do not have access to this permit's lot")
    return permit


def create_permit(actor: User, data: PermitCreate, repo: PermitRepository, lots: LotRepository,
                  today: Optional[date] = None) -> Permit:
    if not can_edit_lot(actor, data.lot_id):
        logger.warning(f"[PERMITS] User {actor.id} denied create in lot {data.lot_id}")
        raise ForbiddenError("Editor access to this lot is required to create permits")
    lots.get_by_id(data.lot_id)

    today = today or permit_lifecycle.utc_now().date()
    issue_date = data.issue_date or today
    filled = data.model_copy(update={
        "issue_date": issue_date,
        "expiration_date": data.expiration_date or issue_date + timedelta(days=settings.DEFAULT_PERMIT_TERM_DAYS),
    })

    if data.permit_number:
        permit = repo.create(filled, created_by=actor.id)
    else:
        permit = _create_with_generated_number(actor, filled, repo, today)

    logger.info(f"[PERMITS] {permit.permit_number} created in lot {permit.lot_id} by {actor.id}")
    return permit


def _create_with_generated_number(actor: User, data: PermitCreate, repo: PermitRepository, today: date) -> Permit:
    attempts = max(1, settings.PERMIT_NUMBER_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        number = generate_permit_number(today)
        try:
            return repo.create(data.model_copy(update={"permit_number": number}), created_by=actor.id)
        except UniqueConstraintViolation:
            logger.info(f"[PERMITS] Generated number {number} taken (attempt {attempt}/{attempts})")
            if attempt == attempts:
                raise


def update_permit(actor: User, permit_id: str, patch: PermitUpdate,
                  repo: PermitRepository, lots: LotRepository) -> Permit:
    current = _editable_permit(actor, permit_id, repo)
    if patch.lot_id is not None and patch.lot_id != current.lot_id:
        if not can_edit_lot(actor, patch.lot_id):
            logger.warning(f"[PERMITS] User {actor.id} denied move of {permit_id} to lot {patch.lot_id}")
            raise ForbiddenError("Editor access to the destination lot is required")
        lots.get_by_id(patch.lot_id)
    return _apply_update(actor, current, patch, repo)


def set_permit_active(actor: User, permit_id: str, is_active: bool, repo: PermitRepository) -> Permit:
    current = _editable_permit(actor, permit_id, repo)
    return _apply_update(actor, current, PermitUpdate(is_active=is_active), repo)


def _editable_permit(actor: User, permit_id: str, repo: PermitRepository) -> Permit:
    current = repo.get_by_id(permit_id)
    if not can_edit_permit(actor, current):
        logger.warning(f"[PERMITS] User {actor.id} denied edit of permit {permit_id}")
        raise ForbiddenError("Editor access to this permit's lot is required")
    return current


def _apply_update(actor: User, current: Permit, patch: PermitUpdate, repo: PermitRepository) -> Permit:
    validate_occupant_status(
        patch.permit_type or current.permit_type,
        patch.occupant_status or current.occupant_status,
    )
    permit = repo.update(current.id, patch)
    logger.info(f"[PERMITS] {permit.permit_number} updated by {actor.id}: {sorted(patch.changes())}")
    return permit


def delete_permit(actor: User, permit_id: str, repo: PermitRepository) -> None:
    permit = repo.get_by_id(permit_id)
    if not can_edit_permit(actor, permit):
        logger.warning(f"[PERMITS] User {actor.id} denied delete of permit {permit_id}")
        raise ForbiddenError("Editor access to this permit's lot is required")
    repo.delete(permit_id)
    logger.info(f"[PERMITS] {permit.permit_number} deleted by {actor.id}")


def find_by_permit_number(actor: User, permit_number: str, repo: PermitRepository) -> Permit:
    permit = repo.get_by_permit_number(permit_number)
    if not can_view_permit(actor, permit):
        raise ForbiddenError("You do not have access to this permit's lot")
    return permit
