# permit_admin/models/permit.py
"""
Permits and their vehicles. One vehicle row per permit, deleted with it.
permit_number carries the unique index that makes concurrent creates safe.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from permit_admin.database import Base


class PermitRecord(Base):
    __tablename__ = "permits"

    id = Column(String(36), primary_key=True)
    permit_number = Column(String(50), unique=True, nullable=False, index=True)
    holder_name = Column(String(200), nullable=False)
    permit_type = Column(String(30), nullable=False)        # resident | retail_tenant | other
    lot_id = Column(String(36), ForeignKey("lots.id", ondelete="RESTRICT"), nullable=False, index=True)
    unit_number = Column(String(50), nullable=False)
    occupant_status = Column(String(30), nullable=False)
    parking_spot_number = Column(String(50), nullable=False)
    issue_date = Column(Date, nullable=False)
    expiration_date = Column(Date, nullable=False, index=True)
    notes = Column(Text)
    qr_identifier = Column(String(500), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    created_by = Column(String(36), nullable=False)

    vehicle = relationship(
        "PermitVehicle", uselist=False, cascade="all, delete-orphan", lazy="joined",
    )

    def __repr__(self):
        return f"<PermitRecord {self.permit_number} lot={self.lot_id} active={self.is_active}>"


class PermitVehicle(Base):
    __tablename__ = "permit_vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    permit_id = Column(String(36), ForeignKey("permits.id", ondelete="CASCADE"),
                       unique=True, nullable=False)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    license_plate = Column(String(50), nullable=False, index=True)
    year = Column(Integer)
    color = Column(String(50))
    image_url = Column(String(500))
