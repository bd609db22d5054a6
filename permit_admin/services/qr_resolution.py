# permit_admin/services/qr_resolution.py
"""
QR scan → permit lookup.

A permit QR code carries either the bare permit id or its deep link
"<QR_BASE_URL>/permit/<id>". Both resolve to the same permit. The outcome
keeps "not found" and "forbidden" apart; whether to show them differently
is the caller's choice (see routers/scan.py).
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from permit_admin.config import settings
from permit_admin.errors import NotFoundError
from permit_admin.schemas.permit import Permit
from permit_admin.services.access_policy import can_view_permit
from permit_admin.utils.logger import get_logger

logger = get_logger(__name__)

PERMIT_LINK_RE = re.compile(r"/permit/([^/?#]+)(?:[/?#]|$)")


class ScanOutcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass
class ScanResult:
    outcome: ScanOutcome
    permit_id: str
    permit: Optional[Permit] = None    # set only when outcome is FOUND

    @property
    def found(self) -> bool:
        return self.outcome == ScanOutcome.FOUND


def build_permit_link(permit_id: str, base_url: Optional[str] = None) -> str:
    """Canonical deep link encoded into a permit's QR code."""
    base = (base_url or settings.QR_BASE_URL).rstrip("/")
    return f"{base}/permit/{permit_id}"


def extract_permit_id(raw_text: str) -> str:
    """Permit id from a scanned payload: the /permit/<id> segment of a link, else the text itself."""
    text = (raw_text or "").strip()
    match = PERMIT_LINK_RE.search(text)
    if match:
        return match.group(1)
    return text


def resolve_scan(raw_text: str, user, repo) -> ScanResult:
    permit_id = extract_permit_id(raw_text)
    if not permit_id:
        logger.info("[SCAN] Empty payload")
        return ScanResult(ScanOutcome.NOT_FOUND, permit_id)

    try:
        permit = repo.get_by_id(permit_id)
    except NotFoundError:
        logger.info(f"[SCAN] No permit for id={permit_id}")
        return ScanResult(ScanOutcome.NOT_FOUND, permit_id)

    if not can_view_permit(user, permit):
        logger.warning(f"[SCAN] User {getattr(user, 'id', None)} denied permit {permit_id} (lot {permit.lot_id})")
        return ScanResult(ScanOutcome.FORBIDDEN, permit_id)

    logger.info(f"[SCAN] Resolved {permit.permit_number} for user {user.id}")
    return ScanResult(ScanOutcome.FOUND, permit_id, permit)
