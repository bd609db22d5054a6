# permit_admin/services/memory_repository.py
"""
Dict-backed repositories. Same contract as the SQL adapters; used as the
test double and for running the API without a database.
"""

import uuid
from datetime import datetime
from typing import Optional

from permit_admin.errors import NotFoundError, UniqueConstraintViolation
from permit_admin.schemas.lot import Lot, LotCreate, LotUpdate
from permit_admin.schemas.permit import Permit, PermitCreate, PermitUpdate, validate_occupant_status
from permit_admin.schemas.user import User, UserCreate, UserUpdate
from permit_admin.services.qr_resolution import build_permit_link
from permit_admin.services.repository import LotRepository, PermitRepository, UserRepository


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryPermitRepository(PermitRepository):
    def __init__(self, permits: Optional[list[Permit]] = None):
        self._permits: dict[str, Permit] = {p.id: p for p in permits or []}

    def list_permits(self, lot_ids=None):
        return [p.model_copy(deep=True) for p in self._permits.values()
                if lot_ids is None or p.lot_id in lot_ids]

    def get_by_id(self, permit_id):
        permit = self._permits.get(permit_id)
        if permit is None:
            raise NotFoundError("Permit", permit_id)
        return permit.model_copy(deep=True)

    def get_by_permit_number(self, permit_number):
        for permit in self._permits.values():
            if permit.permit_number == permit_number:
                return permit.model_copy(deep=True)
        raise NotFoundError("Permit", permit_number)

    def _number_taken(self, permit_number, exclude_id=None) -> bool:
        return any(p.permit_number == permit_number and p.id != exclude_id
                   for p in self._permits.values())

    def create(self, data: PermitCreate, created_by: str) -> Permit:
        if self._number_taken(data.permit_number):
            raise UniqueConstraintViolation("permit_number", data.permit_number)
        now = datetime.utcnow()
        permit_id = _new_id()
        permit = Permit(
            id=permit_id,
            qr_identifier=build_permit_link(permit_id),
            created_at=now,
            updated_at=now,
            created_by=created_by,
            **data.model_dump(),
        )
        self._permits[permit_id] = permit
        return permit.model_copy(deep=True)

    def update(self, permit_id, patch: PermitUpdate) -> Permit:
        current = self.get_by_id(permit_id)
        changes = patch.changes()
        if "permit_number" in changes and self._number_taken(changes["permit_number"], permit_id):
            raise UniqueConstraintViolation("permit_number", changes["permit_number"])
        validate_occupant_status(
            changes.get("permit_type", current.permit_type),
            changes.get("occupant_status", current.occupant_status),
        )
        merged = current.model_dump()
        merged.update(changes)
        merged["updated_at"] = datetime.utcnow()
        updated = Permit.model_validate(merged)
        self._permits[permit_id] = updated
        return updated.model_copy(deep=True)

    def delete(self, permit_id):
        if self._permits.pop(permit_id, None) is None:
            raise NotFoundError("Permit", permit_id)


class InMemoryLotRepository(LotRepository):
    def __init__(self, lots: Optional[list[Lot]] = None):
        self._lots: dict[str, Lot] = {lot.id: lot for lot in lots or []}

    def list_lots(self):
        return sorted((lot.model_copy() for lot in self._lots.values()), key=lambda lot: lot.name)

    def get_by_id(self, lot_id):
        lot = self._lots.get(lot_id)
        if lot is None:
            raise NotFoundError("Lot", lot_id)
        return lot.model_copy()

    def create(self, data: LotCreate) -> Lot:
        lot = Lot(id=_new_id(), **data.model_dump())
        self._lots[lot.id] = lot
        return lot.model_copy()

    def update(self, lot_id, patch: LotUpdate) -> Lot:
        updated = Lot.model_validate(patch.apply_to(self.get_by_id(lot_id)))
        self._lots[lot_id] = updated
        return updated.model_copy()

    def delete(self, lot_id):
        if self._lots.pop(lot_id, None) is None:
            raise NotFoundError("Lot", lot_id)


class InMemoryUserRepository(UserRepository):
    def __init__(self, users: Optional[list[User]] = None):
        self._users: dict[str, User] = {u.id: u for u in users or []}

    def list_users(self):
        return sorted((u.model_copy(deep=True) for u in self._users.values()), key=lambda u: u.email)

    def get_by_id(self, user_id):
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user.model_copy(deep=True)

    def get_by_email(self, email):
        for user in self._users.values():
            if user.email.lower() == email.lower():
                return user.model_copy(deep=True)
        raise NotFoundError("User", email)

    def create(self, data: UserCreate) -> User:
        if any(u.email.lower() == data.email.lower() for u in self._users.values()):
            raise UniqueConstraintViolation("email", data.email)
        now = datetime.utcnow()
        user = User(id=_new_id(), created_at=now, updated_at=now, **data.model_dump())
        self._users[user.id] = user
        return user.model_copy(deep=True)

    def update(self, user_id, patch: UserUpdate) -> User:
        current = self.get_by_id(user_id)
        changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
        updated = current.model_copy(update={**changes, "updated_at": datetime.utcnow()})
        updated = User.model_validate(updated.model_dump())
        self._users[user_id] = updated
        return updated.model_copy(deep=True)
