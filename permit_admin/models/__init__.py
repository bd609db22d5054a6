# Parking Permit Admin: database models
# Import all models here for SQLAlchemy discovery

from permit_admin.models.lot import ParkingLot                          # noqa
from permit_admin.models.user import UserAccount, UserLotAssignment     # noqa
from permit_admin.models.permit import PermitRecord, PermitVehicle      # noqa
