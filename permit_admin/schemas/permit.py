# permit_admin/schemas/permit.py
"""
Permit value objects and the permit-type / occupant-status rule.
"""

from enum import Enum
from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime
from typing import Optional

from permit_admin.errors import PermitValidationError


class PermitType(str, Enum):
    RESIDENT = "resident"
    RETAIL_TENANT = "retail_tenant"
    OTHER = "other"


class OccupantStatus(str, Enum):
    LEASEHOLDER = "leaseholder"
    ADDITIONAL_OCCUPANT = "additional_occupant"
    BUSINESS_OWNER = "business_owner"
    EMPLOYEE = "employee"


class PermitStatus(str, Enum):
    """Display status derived from is_active and expiration date. Never stored."""

    INACTIVE = "inactive"
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    ACTIVE = "active"


VALID_OCCUPANT_STATUSES = {
    PermitType.RESIDENT: {OccupantStatus.LEASEHOLDER, OccupantStatus.ADDITIONAL_OCCUPANT},
    PermitType.RETAIL_TENANT: {OccupantStatus.BUSINESS_OWNER, OccupantStatus.EMPLOYEE},
    PermitType.OTHER: set(OccupantStatus),
}


def validate_occupant_status(permit_type, occupant_status):
    """Raise PermitValidationError if occupant_status is not allowed for permit_type."""
    permit_type = PermitType(permit_type)
    occupant_status = OccupantStatus(occupant_status)
    if occupant_status not in VALID_OCCUPANT_STATUSES[permit_type]:
        raise PermitValidationError(
            f"occupant_status '{occupant_status.value}' is not valid for permit_type '{permit_type.value}'"
        )


class Vehicle(BaseModel):
    make: str
    model: str
    license_plate: str
    year: Optional[int] = None
    color: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class Permit(BaseModel):
    id: str
    permit_number: str = Field(min_length=1)
    holder_name: str
    permit_type: PermitType
    lot_id: str
    unit_number: str
    occupant_status: OccupantStatus
    vehicle: Vehicle
    parking_spot_number: str
    issue_date: date
    expiration_date: date
    notes: Optional[str] = None
    qr_identifier: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
    created_by: str

    @model_validator(mode="after")
    def check_occupant_status(self):
        validate_occupant_status(self.permit_type, self.occupant_status)
        return self


class PermitCreate(BaseModel):
    """New permit as submitted by staff. Missing number and dates are filled in by permit_service."""

    permit_number: Optional[str] = Field(default=None, min_length=1)
    holder_name: str = Field(min_length=1)
    permit_type: PermitType
    lot_id: str = Field(min_length=1)
    unit_number: str = Field(min_length=1)
    occupant_status: OccupantStatus
    vehicle: Vehicle
    parking_spot_number: str = Field(min_length=1)
    issue_date: Optional[date] = None
    expiration_date: Optional[date] = None
    notes: Optional[str] = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_occupant_status(self):
        validate_occupant_status(self.permit_type, self.occupant_status)
        return self


class PermitUpdate(BaseModel):
    permit_number: Optional[str] = Field(default=None, min_length=1)
    holder_name: Optional[str] = Field(default=None, min_length=1)
    permit_type: Optional[PermitType] = None
    lot_id: Optional[str] = Field(default=None, min_length=1)
    unit_number: Optional[str] = Field(default=None, min_length=1)
    occupant_status: Optional[OccupantStatus] = None
    vehicle: Optional[Vehicle] = None
    parking_spot_number: Optional[str] = Field(default=None, min_length=1)
    issue_date: Optional[date] = None
    expiration_date: Optional[date] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    def changes(self) -> dict:
        """Fields explicitly set on this patch (explicit nulls dropped, except notes)."""
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k == "notes"}


class PermitOut(Permit):
    status: PermitStatus
    days_until_expiry: int


class PermitStats(BaseModel):
    total: int
    active: int
    inactive: int
    expiring_soon: int
    expired: int
