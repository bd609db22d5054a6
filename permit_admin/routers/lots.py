"""Lot listing (per user) and admin-only lot management."""

from fastapi import APIRouter, Depends, status

from permit_admin.dependencies import get_current_user, get_lot_repo, get_permit_repo
from permit_admin.schemas.lot import Lot, LotCreate, LotUpdate
from permit_admin.schemas.user import User
from permit_admin.services import lot_service
from permit_admin.services.repository import LotRepository, PermitRepository

router = APIRouter()


@router.get("/lots", response_model=list[Lot])
def list_lots(user: User = Depends(get_current_user), lots: LotRepository = Depends(get_lot_repo)):
    return lot_service.list_visible_lots(user, lots)


@router.post("/lots", response_model=Lot, status_code=status.HTTP_201_CREATED)
def create_lot(body: LotCreate, user: User = Depends(get_current_user), lots: LotRepository = Depends(get_lot_repo)):
    return lot_service.create_lot(user, body, lots)


@router.patch("/lots/{lot_id}", response_model=Lot, summary="Edit a lot (available spots are clamped to capacity)")
def update_lot(lot_id: str, body: LotUpdate, user: User = Depends(get_current_user),
               lots: LotRepository = Depends(get_lot_repo)):
    return lot_service.update_lot(user, lot_id, body, lots)


@router.delete("/lots/{lot_id}", summary="Delete a lot with no permits")
def delete_lot(lot_id: str, user: User = Depends(get_current_user),
               lots: LotRepository = Depends(get_lot_repo),
               permits: PermitRepository = Depends(get_permit_repo)):
    lot_service.delete_lot(user, lot_id, lots, permits)
    return {"status": "deleted", "lot_id": lot_id}
