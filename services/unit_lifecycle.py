"""
Unit Lifecycle - status transitions and reservation locks.

     available -> locked -> booked -> sold
         ^          |         |
         +----------+---------+   (release / cancellation)

Each transition is one conditional update keyed on the expected prior
status (services.unit_store.conditional_update). The current status is read
only after a failed update, to report what the unit actually was.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from errors import InvalidTransitionError, ValidationError
from models import Unit, UnitStatus
from . import unit_store

ALLOWED_TRANSITIONS = {
     UnitStatus.AVAILABLE: {UnitStatus.LOCKED},
     UnitStatus.LOCKED: {UnitStatus.AVAILABLE, UnitStatus.BOOKED},
     UnitStatus.BOOKED: {UnitStatus.AVAILABLE, UnitStatus.SOLD},  # available = cancellation
     UnitStatus.SOLD: set(),
}

_CLEARED_LOCK = {"locked_by": None, "locked_until": None}


def utcnow() -> datetime:
     """Naive UTC timestamp, matching the DateTime columns."""
     return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_status(value) -> UnitStatus:
     try:
          return UnitStatus(value)
     except ValueError:
          allowed = ", ".join(s.value for s in UnitStatus)
          raise ValidationError(f'Unknown unit status "{value}". Expected one of: {allowed}') from None


def can_transition(from_status: UnitStatus, to_status: UnitStatus) -> bool:
     return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def assert_transition(unit_id: int, from_status: UnitStatus, to_status: UnitStatus) -> None:
     if not can_transition(from_status, to_status):
          raise InvalidTransitionError(unit_id, from_status.value, to_status.value)


def _reject(db: Session, unit_id: int, to_status: UnitStatus, reason: Optional[str] = None):
     """Raise NotFoundError or InvalidTransitionError for a failed update."""
     unit = unit_store.get_unit_or_raise(db, unit_id)
     raise InvalidTransitionError(unit_id, unit.status.value, to_status.value, reason)


def reclaim_if_expired(db: Session, unit_id: int, now: datetime) -> bool:
     """Release the unit's lock if its TTL has passed. Returns True if released."""
     return unit_store.conditional_update(
          db,
          unit_id,
          UnitStatus.LOCKED,
          {"status": UnitStatus.AVAILABLE, **_CLEARED_LOCK},
          Unit.locked_until < now,
     )


def lock(
     db: Session,
     unit_id: int,
     user_id: str,
     minutes: int,
     now: Optional[datetime] = None
) -> Unit:
     """
     Lock an available unit for user_id for the given number of minutes.

     Raises:
          ValidationError: If user_id is empty or minutes is not a positive integer
          NotFoundError: If the unit does not exist
          InvalidTransitionError: If the unit is not available
     """
     if not user_id:
          raise ValidationError("A user ID is required to lock a unit")
     if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
          raise ValidationError(f"Lock minutes must be a positive integer, got {minutes!r}")

     now = now or utcnow()
     reclaim_if_expired(db, unit_id, now)

     locked = unit_store.conditional_update(
          db,
          unit_id,
          UnitStatus.AVAILABLE,
          {
               "status": UnitStatus.LOCKED,
               "locked_by": str(user_id),
               "locked_until": now + timedelta(minutes=minutes),
          },
     )
     if not locked:
          _reject(db, unit_id, UnitStatus.LOCKED, "unit is not available")
     return unit_store.get_unit_or_raise(db, unit_id)


def release(db: Session, unit_id: int) -> Unit:
     """Release a locked unit back to available."""
     released = unit_store.conditional_update(
          db,
          unit_id,
          UnitStatus.LOCKED,
          {"status": UnitStatus.AVAILABLE, **_CLEARED_LOCK},
     )
     if not released:
          _reject(db, unit_id, UnitStatus.AVAILABLE, "unit is not locked")
     return unit_store.get_unit_or_raise(db, unit_id)


def release_expired(db: Session, unit_id: int, now: datetime) -> Unit:
     """
     Release a lock only if it is still expired at ``now``.

     A unit that was booked, released or re-locked since it was selected
     fails with InvalidTransitionError instead of being overwritten.
     """
     if not reclaim_if_expired(db, unit_id, now):
          _reject(db, unit_id, UnitStatus.AVAILABLE, "lock is not expired")
     return unit_store.get_unit_or_raise(db, unit_id)


def book(
     db: Session,
     unit_id: int,
     booking_id: str,
     now: Optional[datetime] = None
) -> Unit:
     """Book a unit that holds an unexpired lock; clears the lock fields."""
     if not booking_id:
          raise ValidationError("A booking ID is required to book a unit")

     now = now or utcnow()
     booked = unit_store.conditional_update(
          db,
          unit_id,
          UnitStatus.LOCKED,
          {"status": UnitStatus.BOOKED, "booking_id": str(booking_id), **_CLEARED_LOCK},
          Unit.locked_until >= now,
     )
     if not booked:
          unit = unit_store.get_unit_or_raise(db, unit_id)
          reason = "lock has expired" if unit.status == UnitStatus.LOCKED else "unit must be locked before booking"
          raise InvalidTransitionError(unit_id, unit.status.value, UnitStatus.BOOKED.value, reason)
     return unit_store.get_unit_or_raise(db, unit_id)


def cancel(db: Session, unit_id: int) -> Unit:
     """Cancel a booking; the unit returns to available."""
     cancelled = unit_store.conditional_update(
          db,
          unit_id,
          UnitStatus.BOOKED,
          {"status": UnitStatus.AVAILABLE, "booking_id": None},
     )
     if not cancelled:
          _reject(db, unit_id, UnitStatus.AVAILABLE, "unit is not booked")
     return unit_store.get_unit_or_raise(db, unit_id)


def sell(db: Session, unit_id: int) -> Unit:
     """Mark a booked unit as sold (terminal)."""
     sold = unit_store.conditional_update(
          db,
          unit_id,
          UnitStatus.BOOKED,
          {"status": UnitStatus.SOLD},
     )
     if not sold:
          _reject(db, unit_id, UnitStatus.SOLD, "unit is not booked")
     return unit_store.get_unit_or_raise(db, unit_id)
