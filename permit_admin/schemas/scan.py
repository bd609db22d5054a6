# permit_admin/schemas/scan.py
from pydantic import BaseModel, Field
from typing import Optional
from permit_admin.schemas.permit import PermitOut


class ScanRequest(BaseModel):
    payload: str = Field(min_length=1)     # raw text decoded from the QR code


class ScanResponse(BaseModel):
    outcome: str            # found | not_found | forbidden
    permit_id: str
    permit: Optional[PermitOut] = None
