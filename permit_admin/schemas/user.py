# permit_admin/schemas/user.py
from enum import Enum
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class Role(str, Enum):
    """Staff roles, declared lowest to highest privilege."""

    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return list(Role).index(self)


class User(BaseModel):
    id: str
    email: str
    name: str
    role: Role = Role.VIEWER
    assigned_lots: set[str] = Field(default_factory=set)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserCreate(BaseModel):
    email: str = Field(min_length=3)
    name: str = Field(min_length=1)
    role: Role = Role.VIEWER
    assigned_lots: set[str] = Field(default_factory=set)


class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[Role] = None
    assigned_lots: Optional[set[str]] = None
