"""Shared fixtures: staff users, permit/lot builders and a throwaway SQLite session."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-key")
os.environ.setdefault("LOG_DIR", "")

import uuid
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from permit_admin.database import create_tables
from permit_admin.schemas.lot import Lot
from permit_admin.schemas.permit import Permit, PermitCreate, Vehicle
from permit_admin.schemas.user import Role, User
from permit_admin.services.qr_resolution import build_permit_link

NOW = datetime(2026, 10, 18, 0, 0, 0)
TODAY = datetime.utcnow().date()


@pytest.fixture
def admin():
    return User(id="u-admin", email="admin@parkingsystem.com", name="Admin", role=Role.ADMIN)


@pytest.fixture
def editor():
    return User(id="u-editor", email="editor@parkingsystem.com", name="Editor",
                role=Role.EDITOR, assigned_lots={"lot-a"})


@pytest.fixture
def viewer():
    return User(id="u-viewer", email="viewer@parkingsystem.com", name="Viewer",
                role=Role.VIEWER, assigned_lots={"retail-1"})


@pytest.fixture
def make_lot():
    def _make(lot_id="lot-a", name="Lot A", total_spots=50, available_spots=40, **extra):
        return Lot(id=lot_id, name=name, total_spots=total_spots, available_spots=available_spots, **extra)
    return _make


@pytest.fixture
def permit_data():
    def _make(**overrides):
        fields = dict(
            permit_number="PMT-001-2026",
            holder_name="John Smith",
            permit_type="resident",
            lot_id="lot-a",
            unit_number="101",
            occupant_status="leaseholder",
            vehicle=Vehicle(make="Toyota", model="Camry", license_plate="ABC-123", year=2021, color="Silver"),
            parking_spot_number="A-15",
            issue_date=TODAY,
            expiration_date=TODAY + timedelta(days=365),
        )
        fields.update(overrides)
        return PermitCreate(**fields)
    return _make


@pytest.fixture
def make_permit(permit_data):
    def _make(permit_id=None, created_by="u-admin", **overrides):
        permit_id = permit_id or str(uuid.uuid4())
        data = permit_data(**overrides)
        return Permit(
            id=permit_id,
            qr_identifier=build_permit_link(permit_id),
            created_at=NOW,
            updated_at=NOW,
            created_by=created_by,
            **data.model_dump(),
        )
    return _make


@pytest.fixture
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
