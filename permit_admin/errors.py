# permit_admin/errors.py
"""
Error taxonomy shared by the policy, lifecycle, scan and repository layers.
Routers translate these into HTTP responses (see main.py exception handlers).
"""


class PermitAdminError(Exception):
    """Base class for every domain error raised by this package."""


class NotFoundError(PermitAdminError):
    def __init__(self, entity: str, key: str):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' not found")


class ForbiddenError(PermitAdminError):
    """The acting user is not allowed to perform the operation."""


class UniqueConstraintViolation(PermitAdminError):
    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field} '{value}' already exists")


class InvalidDateError(PermitAdminError, ValueError):
    """A permit date could not be interpreted."""


class PermitValidationError(PermitAdminError, ValueError):
    """Cross-field permit invariant violated (e.g. occupant status vs permit type)."""


class LotInUseError(PermitAdminError):
    def __init__(self, lot_id: str, permit_count: int):
        self.lot_id = lot_id
        self.permit_count = permit_count
        super().__init__(f"Lot '{lot_id}' is referenced by {permit_count} permit(s)")
