# permit_admin/services/permit_lifecycle.py
"""
Permit display status: inactive / expired / expiring soon / active.

  - is_active == False wins over any date
  - days_until_expiry = ceil((expiration - now) / 1 day)
  - < 0 → expired, 0..window (inclusive) → expiring soon, otherwise active

"now" is always injectable; it only defaults to the wall clock.
"""

import math
from datetime import date, datetime, time
from typing import Iterable, Optional

from permit_admin.config import settings
from permit_admin.errors import InvalidDateError
from permit_admin.schemas.permit import PermitStats, PermitStatus

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    """The one clock for statuses and default dates (naive UTC)."""
    return datetime.utcnow()


def _as_datetime(value, field_name: str = "expiration_date") -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise InvalidDateError(f"Malformed {field_name}: {value!r}") from None
    raise InvalidDateError(f"Malformed {field_name}: {value!r}")


def days_until_expiry(expiration_date, now: Optional[datetime] = None) -> int:
    """Whole days left before expiration, rounded up. 0 means it expires today."""
    expires = _as_datetime(expiration_date)
    now = _as_datetime(now, "now") if now is not None else utc_now()

    # Compare naive against aware by assuming the other side's zone
    if expires.tzinfo is None and now.tzinfo is not None:
        expires = expires.replace(tzinfo=now.tzinfo)
    elif expires.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=expires.tzinfo)

    return math.ceil((expires - now).total_seconds() / SECONDS_PER_DAY)


def evaluate_status(permit, now: Optional[datetime] = None, window_days: Optional[int] = None) -> PermitStatus:
    if not permit.is_active:
        return PermitStatus.INACTIVE

    window = settings.EXPIRING_SOON_DAYS if window_days is None else window_days
    days = days_until_expiry(permit.expiration_date, now)
    if days < 0:
        return PermitStatus.EXPIRED
    if days <= window:
        return PermitStatus.EXPIRING_SOON
    return PermitStatus.ACTIVE


def summarize_permits(permits: Iterable, now: Optional[datetime] = None) -> PermitStats:
    """Dashboard counts. `active` counts the is_active flag, the rest are derived statuses."""
    now = now or utc_now()
    counts = {status: 0 for status in PermitStatus}
    total = active = 0
    for permit in permits:
        total += 1
        if permit.is_active:
            active += 1
        counts[evaluate_status(permit, now)] += 1

    return PermitStats(
        total=total,
        active=active,
        inactive=counts[PermitStatus.INACTIVE],
        expiring_soon=counts[PermitStatus.EXPIRING_SOON],
        expired=counts[PermitStatus.EXPIRED],
    )
