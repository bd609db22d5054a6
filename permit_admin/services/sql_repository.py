# permit_admin/services/sql_repository.py
"""
SQLAlchemy-backed repositories. One instance per request Session.
Each write commits immediately; failures roll back before raising.
"""

import uuid
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from permit_admin.errors import NotFoundError, UniqueConstraintViolation
from permit_admin.models.lot import ParkingLot
from permit_admin.models.permit import PermitRecord, PermitVehicle
from permit_admin.models.user import UserAccount, UserLotAssignment
from permit_admin.schemas.lot import Lot, LotCreate, LotUpdate
from permit_admin.schemas.permit import Permit, PermitCreate, PermitUpdate, Vehicle, validate_occupant_status
from permit_admin.schemas.user import User, UserCreate, UserUpdate
from permit_admin.services.qr_resolution import build_permit_link
from permit_admin.services.repository import LotRepository, PermitRepository, UserRepository
from permit_admin.utils.logger import get_logger

logger = get_logger(__name__)

VEHICLE_FIELDS = ("make", "model", "license_plate", "year", "color", "image_url")


def _to_permit(row: PermitRecord) -> Permit:
    vehicle = row.vehicle
    return Permit(
        id=row.id,
        permit_number=row.permit_number,
        holder_name=row.holder_name,
        permit_type=row.permit_type,
        lot_id=row.lot_id,
        unit_number=row.unit_number,
        occupant_status=row.occupant_status,
        vehicle=Vehicle.model_validate(vehicle) if vehicle else Vehicle(make="", model="", license_plate=""),
        parking_spot_number=row.parking_spot_number,
        issue_date=row.issue_date,
        expiration_date=row.expiration_date,
        notes=row.notes,
        qr_identifier=row.qr_identifier,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
        created_by=row.created_by,
    )


def _to_user(row: UserAccount) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        role=row.role,
        assigned_lots={a.lot_id for a in row.lot_assignments},
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlPermitRepository(PermitRepository):
    def __init__(self, db: Session):
        self.db = db

    def _row(self, permit_id) -> PermitRecord:
        row = self.db.query(PermitRecord).filter(PermitRecord.id == permit_id).first()
        if not row:
            raise NotFoundError("Permit", permit_id)
        return row

    def _number_taken(self, permit_number, exclude_id=None) -> bool:
        q = self.db.query(PermitRecord.id).filter(PermitRecord.permit_number == permit_number)
        if exclude_id:
            q = q.filter(PermitRecord.id != exclude_id)
        return q.first() is not None

    def _commit(self, permit_number):
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(f"[PERMITS] Integrity error on permit {permit_number}: {exc.orig}")
            if self._number_taken(permit_number):
                raise UniqueConstraintViolation("permit_number", permit_number) from exc
            raise

    def list_permits(self, lot_ids=None):
        q = self.db.query(PermitRecord)
        if lot_ids is not None:
            if not lot_ids:
                return []
            q = q.filter(PermitRecord.lot_id.in_(list(lot_ids)))
        return [_to_permit(row) for row in q.order_by(PermitRecord.created_at.desc()).all()]

    def get_by_id(self, permit_id):
        return _to_permit(self._row(permit_id))

    def get_by_permit_number(self, permit_number):
        row = self.db.query(PermitRecord).filter(PermitRecord.permit_number == permit_number).first()
        if not row:
            raise NotFoundError("Permit", permit_number)
        return _to_permit(row)

    def create(self, data: PermitCreate, created_by: str) -> Permit:
        if self._number_taken(data.permit_number):
            raise UniqueConstraintViolation("permit_number", data.permit_number)
        if self.db.get(ParkingLot, data.lot_id) is None:
            raise NotFoundError("Lot", data.lot_id)

        now = datetime.utcnow()
        permit_id = str(uuid.uuid4())
        row = PermitRecord(
            id=permit_id,
            permit_number=data.permit_number,
            holder_name=data.holder_name,
            permit_type=data.permit_type.value,
            lot_id=data.lot_id,
            unit_number=data.unit_number,
            occupant_status=data.occupant_status.value,
            parking_spot_number=data.parking_spot_number,
            issue_date=data.issue_date,
            expiration_date=data.expiration_date,
            notes=data.notes,
            qr_identifier=build_permit_link(permit_id),
            is_active=data.is_active,
            created_at=now,
            updated_at=now,
            created_by=created_by,
        )
        # Permit and vehicle land in the same commit, or neither does
        row.vehicle = PermitVehicle(**data.vehicle.model_dump(include=set(VEHICLE_FIELDS)))
        self.db.add(row)
        self._commit(data.permit_number)
        self.db.refresh(row)
        return _to_permit(row)

    def update(self, permit_id, patch: PermitUpdate) -> Permit:
        row = self._row(permit_id)
        changes = patch.changes()
        if "permit_number" in changes and self._number_taken(changes["permit_number"], permit_id):
            raise UniqueConstraintViolation("permit_number", changes["permit_number"])
        if "lot_id" in changes and self.db.get(ParkingLot, changes["lot_id"]) is None:
            raise NotFoundError("Lot", changes["lot_id"])
        validate_occupant_status(
            changes.get("permit_type", row.permit_type),
            changes.get("occupant_status", row.occupant_status),
        )

        vehicle = changes.pop("vehicle", None)
        for field, value in changes.items():
            setattr(row, field, value.value if hasattr(value, "value") else value)
        if vehicle is not None:
            if row.vehicle is None:
                row.vehicle = PermitVehicle()
            for field in VEHICLE_FIELDS:
                setattr(row.vehicle, field, vehicle.get(field))
        row.updated_at = datetime.utcnow()
        self._commit(row.permit_number)
        self.db.refresh(row)
        return _to_permit(row)

    def delete(self, permit_id):
        row = self._row(permit_id)
        self.db.delete(row)
        self.db.commit()


class SqlLotRepository(LotRepository):
    def __init__(self, db: Session):
        self.db = db

    def _row(self, lot_id) -> ParkingLot:
        row = self.db.get(ParkingLot, lot_id)
        if not row:
            raise NotFoundError("Lot", lot_id)
        return row

    def list_lots(self):
        return [Lot.model_validate(row) for row in self.db.query(ParkingLot).order_by(ParkingLot.name).all()]

    def get_by_id(self, lot_id):
        return Lot.model_validate(self._row(lot_id))

    def create(self, data: LotCreate) -> Lot:
        row = ParkingLot(id=str(uuid.uuid4()), **data.model_dump())
        self.db.add(row)
        self.db.commit()
        return Lot.model_validate(row)

    def update(self, lot_id, patch: LotUpdate) -> Lot:
        row = self._row(lot_id)
        merged = patch.apply_to(Lot.model_validate(row))
        for field in ("name", "description", "total_spots", "available_spots"):
            setattr(row, field, merged[field])
        self.db.commit()
        return Lot.model_validate(row)

    def delete(self, lot_id):
        self.db.delete(self._row(lot_id))
        self.db.commit()


class SqlUserRepository(UserRepository):
    def __init__(self, db: Session):
        self.db = db

    def _row(self, user_id) -> UserAccount:
        row = self.db.get(UserAccount, user_id)
        if not row:
            raise NotFoundError("User", user_id)
        return row

    def list_users(self):
        return [_to_user(row) for row in self.db.query(UserAccount).order_by(UserAccount.email).all()]

    def get_by_id(self, user_id):
        return _to_user(self._row(user_id))

    def get_by_email(self, email):
        row = self.db.query(UserAccount).filter(UserAccount.email == email.lower()).first()
        if not row:
            raise NotFoundError("User", email)
        return _to_user(row)

    def create(self, data: UserCreate) -> User:
        email = data.email.lower()
        if self.db.query(UserAccount.id).filter(UserAccount.email == email).first():
            raise UniqueConstraintViolation("email", data.email)
        now = datetime.utcnow()
        row = UserAccount(id=str(uuid.uuid4()), email=email, name=data.name,
                          role=data.role.value, created_at=now, updated_at=now)
        row.lot_assignments = [UserLotAssignment(lot_id=lot_id) for lot_id in sorted(data.assigned_lots)]
        self.db.add(row)
        self.db.commit()
        return _to_user(row)

    def update(self, user_id, patch: UserUpdate) -> User:
        row = self._row(user_id)
        if patch.name is not None:
            row.name = patch.name
        if patch.role is not None:
            row.role = patch.role.value
        if patch.assigned_lots is not None:
            row.lot_assignments = [UserLotAssignment(lot_id=lot_id) for lot_id in sorted(patch.assigned_lots)]
        row.updated_at = datetime.utcnow()
        self.db.commit()
        return _to_user(row)
