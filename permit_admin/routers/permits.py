"""Permit CRUD, search and dashboard stats."""

from fastapi import APIRouter, Depends, status
from typing import Optional

from permit_admin.dependencies import get_current_user, get_lot_repo, get_permit_repo
from permit_admin.schemas.permit import PermitCreate, PermitOut, PermitStats, PermitStatus, PermitUpdate
from permit_admin.schemas.user import User
from permit_admin.services import permit_service
from permit_admin.services.lot_service import lot_names
from permit_admin.services.permit_lifecycle import summarize_permits
from permit_admin.services.repository import LotRepository, PermitRepository

router = APIRouter()


@router.get("/permits", response_model=list[PermitOut], summary="Permits visible to the current user")
def list_permits(
    q: Optional[str] = None,
    lot_id: Optional[str] = None,
    permit_status: Optional[PermitStatus] = None,
    user: User = Depends(get_current_user),
    permits: PermitRepository = Depends(get_permit_repo),
    lots: LotRepository = Depends(get_lot_repo),
):
    """Search matches permit number, holder name, license plate and lot name (case-insensitive)."""
    names = lot_names(lots) if q else None
    results = [permit_service.with_status(p)
               for p in permit_service.list_visible_permits(user, permits, search=q, lot_names=names)]
    if lot_id:
        results = [p for p in results if p.lot_id == lot_id]
    if permit_status:
        results = [p for p in results if p.status == permit_status]
    return results


@router.get("/permits/stats", response_model=PermitStats, summary="Dashboard counts")
def permit_stats(user: User = Depends(get_current_user), permits: PermitRepository = Depends(get_permit_repo)):
    return summarize_permits(permit_service.list_visible_permits(user, permits))


@router.get("/permits/by-number/{permit_number}", response_model=PermitOut)
def get_permit_by_number(permit_number: str, user: User = Depends(get_current_user),
                         permits: PermitRepository = Depends(get_permit_repo)):
    return permit_service.with_status(permit_service.find_by_permit_number(user, permit_number, permits))


@router.get("/permits/{permit_id}", response_model=PermitOut)
def get_permit(permit_id: str, user: User = Depends(get_current_user),
               permits: PermitRepository = Depends(get_permit_repo)):
    return permit_service.with_status(permit_service.get_permit(user, permit_id, permits))


@router.post("/permits", response_model=PermitOut, status_code=status.HTTP_201_CREATED)
def create_permit(body: PermitCreate, user: User = Depends(get_current_user),
                  permits: PermitRepository = Depends(get_permit_repo),
                  lots: LotRepository = Depends(get_lot_repo)):
    """Permit number, issue date and expiration date are generated when omitted."""
    return permit_service.with_status(permit_service.create_permit(user, body, permits, lots))


@router.patch("/permits/{permit_id}", response_model=PermitOut)
def update_permit(permit_id: str, body: PermitUpdate, user: User = Depends(get_current_user),
                  permits: PermitRepository = Depends(get_permit_repo),
                  lots: LotRepository = Depends(get_lot_repo)):
    return permit_service.with_status(permit_service.update_permit(user, permit_id, body, permits, lots))


@router.delete("/permits/{permit_id}")
def delete_permit(permit_id: str, user: User = Depends(get_current_user),
                  permits: PermitRepository = Depends(get_permit_repo)):
    permit_service.delete_permit(user, permit_id, permits)
    return {"status": "deleted", "permit_id": permit_id}
