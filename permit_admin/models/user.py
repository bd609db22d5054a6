# permit_admin/models/user.py
"""
Staff accounts and their lot assignments (user_lot_assignments).
"""

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from permit_admin.database import Base


class UserAccount(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default="viewer")   # viewer | editor | admin
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    lot_assignments = relationship(
        "UserLotAssignment", cascade="all, delete-orphan", lazy="selectin",
    )

    def __repr__(self):
        return f"<UserAccount {self.email} role={self.role}>"


class UserLotAssignment(Base):
    __tablename__ = "user_lot_assignments"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    lot_id = Column(String(36), ForeignKey("lots.id", ondelete="CASCADE"), primary_key=True)
