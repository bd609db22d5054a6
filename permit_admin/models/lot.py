# permit_admin/models/lot.py
"""
Parking lots. available_spots is kept within [0, total_spots] by the repositories.
Permits reference lots with ON DELETE RESTRICT; lot_service blocks deletes first.
"""

from sqlalchemy import Column, Integer, String, Text
from permit_admin.database import Base


class ParkingLot(Base):
    __tablename__ = "lots"

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text)
    total_spots = Column(Integer, nullable=False)
    available_spots = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<ParkingLot {self.name} spots={self.available_spots}/{self.total_spots}>"
