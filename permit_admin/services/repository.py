# permit_admin/services/repository.py
"""
Storage contract consumed by the permit, lot and user services.

Adapters (sql_repository, memory_repository) implement these classes.
Repositories never check permissions: callers run access_policy first.
Lookups raise NotFoundError; permit-number collisions raise
UniqueConstraintViolation with nothing written.
"""

from abc import ABC, abstractmethod
from typing import Optional

from permit_admin.schemas.lot import Lot, LotCreate, LotUpdate
from permit_admin.schemas.permit import Permit, PermitCreate, PermitUpdate
from permit_admin.schemas.user import User, UserCreate, UserUpdate


class PermitRepository(ABC):
    @abstractmethod
    def list_permits(self, lot_ids: Optional[set[str]] = None) -> list[Permit]:
        """Unordered snapshot. lot_ids=None means every lot."""

    @abstractmethod
    def get_by_id(self, permit_id: str) -> Permit: ...

    @abstractmethod
    def get_by_permit_number(self, permit_number: str) -> Permit: ...

    @abstractmethod
    def create(self, data: PermitCreate, created_by: str) -> Permit:
        """data must carry permit_number, issue_date and expiration_date."""

    @abstractmethod
    def update(self, permit_id: str, patch: PermitUpdate) -> Permit: ...

    @abstractmethod
    def delete(self, permit_id: str) -> None: ...


class LotRepository(ABC):
    @abstractmethod
    def list_lots(self) -> list[Lot]: ...

    @abstractmethod
    def get_by_id(self, lot_id: str) -> Lot: ...

    @abstractmethod
    def create(self, data: LotCreate) -> Lot: ...

    @abstractmethod
    def update(self, lot_id: str, patch: LotUpdate) -> Lot:
        """available_spots is clamped to [0, total_spots] after the patch."""

    @abstractmethod
    def delete(self, lot_id: str) -> None: ...


class UserRepository(ABC):
    @abstractmethod
    def list_users(self) -> list[User]: ...

    @abstractmethod
    def get_by_id(self, user_id: str) -> User: ...

    @abstractmethod
    def get_by_email(self, email: str) -> User: ...

    @abstractmethod
    def create(self, data: UserCreate) -> User: ...

    @abstractmethod
    def update(self, user_id: str, patch: UserUpdate) -> User: ...
