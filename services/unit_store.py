"""
Unit store - storage primitives used by the unit lifecycle and the reclaimer.

Every status mutation goes through conditional_update, a single
UPDATE ... WHERE id = :id AND status = :expected statement. Concurrent
writers therefore cannot both succeed against the same prior status: the
database serializes the row update and the loser matches zero rows.

Functions here never commit; the caller owns the transaction.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from errors import NotFoundError
from models import Project, Tenant, Tower, Unit, UnitStatus, UnitTypeRule


def get_unit(db: Session, unit_id: int) -> Optional[Unit]:
     """Fetch a unit with its current stored state."""
     return db.get(Unit, unit_id, populate_existing=True)


def get_unit_or_raise(db: Session, unit_id: int) -> Unit:
     unit = get_unit(db, unit_id)
     if unit is None:
          raise NotFoundError("Unit", unit_id)
     return unit


def conditional_update(
     db: Session,
     unit_id: int,
     expected_status: UnitStatus,
     values: dict,
     *criteria
) -> bool:
     """
     Atomically update a unit only if it is still in expected_status.

     Args:
          db: SQLAlchemy database session
          unit_id: ID of the unit
          expected_status: Status the unit must have for the update to apply
          values: Column values to set
          *criteria: Extra WHERE clauses (e.g. on locked_until)

     Returns:
          True if the row was updated, False if the condition did not match
     """
     statement = (
          update(Unit)
          .where(Unit.id == unit_id, Unit.status == expected_status, *criteria)
          .values(**values)
          .execution_options(synchronize_session=False)
     )
     result = db.execute(statement)
     return result.rowcount == 1


def find_expired_locks(db: Session, now: datetime) -> list[int]:
     """IDs of locked units whose lock expired before now."""
     statement = (
          select(Unit.id)
          .where(Unit.status == UnitStatus.LOCKED, Unit.locked_until < now)
          .order_by(Unit.locked_until)
     )
     return list(db.execute(statement).scalars().all())


# ---------------------------------------------------------------------------
# Read-only lookups
# ---------------------------------------------------------------------------

def get_tower(db: Session, tower_id: int) -> Tower:
     tower = db.get(Tower, tower_id)
     if tower is None:
          raise NotFoundError("Tower", tower_id)
     return tower


def get_project(db: Session, project_id: int) -> Project:
     project = db.get(Project, project_id)
     if project is None:
          raise NotFoundError("Project", project_id)
     return project


def get_tenant(db: Session, tenant_id: int) -> Tenant:
     tenant = db.get(Tenant, tenant_id)
     if tenant is None:
          raise NotFoundError("Tenant", tenant_id)
     return tenant


def get_active_unit_type_rule(
     db: Session,
     tenant_id: int,
     project_id: int,
     unit_type: str
) -> Optional[UnitTypeRule]:
     """Active rule for (tenant, project, unit type), or None."""
     return db.query(UnitTypeRule).filter(
          UnitTypeRule.tenant_id == tenant_id,
          UnitTypeRule.project_id == project_id,
          UnitTypeRule.unit_type == unit_type,
          UnitTypeRule.active.is_(True)
     ).first()
