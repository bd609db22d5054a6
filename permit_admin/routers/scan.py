"""
QR scan endpoint.
With SCAN_HIDE_FORBIDDEN (default) a permit in a lot the scanner cannot see
is reported as not_found, so scans do not reveal which permits exist.
"""

from fastapi import APIRouter, Depends

from permit_admin.config import settings
from permit_admin.dependencies import get_current_user, get_permit_repo
from permit_admin.schemas.scan import ScanRequest, ScanResponse
from permit_admin.schemas.user import User
from permit_admin.services.permit_service import with_status
from permit_admin.services.qr_resolution import ScanOutcome, resolve_scan
from permit_admin.services.repository import PermitRepository

router = APIRouter()


@router.post("/scan", response_model=ScanResponse, summary="Resolve a scanned QR payload to a permit")
def scan_permit(body: ScanRequest, user: User = Depends(get_current_user),
                permits: PermitRepository = Depends(get_permit_repo)):
    result = resolve_scan(body.payload, user, permits)
    outcome = result.outcome
    if outcome == ScanOutcome.FORBIDDEN and settings.SCAN_HIDE_FORBIDDEN:
        outcome = ScanOutcome.NOT_FOUND
    return ScanResponse(
        outcome=outcome.value,
        permit_id=result.permit_id,
        permit=with_status(result.permit) if result.found else None,
    )
