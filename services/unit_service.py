"""
Unit Service - pricing and reservation operations exposed to callers.

This service wires the stores, the rule resolver, the pricing calculator
and the unit lifecycle together. Callers (API layer, assistants, jobs)
own the session and its transaction.
"""
import logging
from datetime import datetime
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from config import config
from errors import InventoryError, ValidationError
from models import Unit, UnitStatus
from schemas.inventory import StatusChangeData
from schemas.price_breakdown import PriceBreakdown
from . import pricing_calculator, rule_resolver, unit_lifecycle, unit_store

logger = logging.getLogger(__name__)


class UnitService:
     """Service class for unit pricing and lifecycle business logic."""

     @staticmethod
     def get_unit(db: Session, unit_id: int, now: Optional[datetime] = None) -> Unit:
          """
          Fetch a unit, releasing its lock first if the lock has expired.

          Raises:
               NotFoundError: If the unit doesn't exist
          """
          now = now or unit_lifecycle.utcnow()
          if unit_lifecycle.reclaim_if_expired(db, unit_id, now):
               logger.info(f"Released expired lock on read for unit {unit_id}")
          return unit_store.get_unit_or_raise(db, unit_id)

     @staticmethod
     def compute_price(
          db: Session,
          unit_id: int,
          options: Optional[dict] = None
     ) -> PriceBreakdown:
          """
          Calculate the unit price with all premiums, charges and taxes.

          The four rule layers are fetched here and passed explicitly to the
          resolver; the calculator itself performs no lookups. A price may be
          requested whatever the unit's lock state.

          Args:
               db: SQLAlchemy database session
               unit_id: ID of the unit
               options: Call-site rule overrides (highest precedence)

          Returns:
               PriceBreakdown

          Raises:
               NotFoundError: If the unit, tower, project or tenant doesn't exist
               ConfigurationError: If tower/project pricing data is malformed
               ValidationError: If any rule layer is malformed
          """
          try:
               unit = unit_store.get_unit_or_raise(db, unit_id)
               tower = unit_store.get_tower(db, unit.tower_id)
               project = unit_store.get_project(db, unit.project_id)
               tenant = unit_store.get_tenant(db, unit.tenant_id)
               unit_type_rule = unit_store.get_active_unit_type_rule(
                    db, unit.tenant_id, unit.project_id, unit.unit_type
               )

               rules = rule_resolver.resolve(
                    tenant.pricing_rules,
                    project.custom_pricing_model,
                    unit_type_rule.pricing_rules if unit_type_rule else None,
                    options,
               )

               breakdown = pricing_calculator.compute_breakdown(
                    pricing_calculator.build_unit_snapshot(unit),
                    pricing_calculator.build_tower_snapshot(tower),
                    pricing_calculator.build_project_snapshot(project),
                    rules,
               )
          except InventoryError as e:
               logger.error(f"Error calculating price for unit {unit_id}: {e}")
               raise

          if rules.log_calculation:
               logger.info(
                    f"Price calculation for unit {unit.id} ({unit.number}): "
                    f"total={breakdown.total_price} by {rules.calculated_by or 'system'}"
               )
          return breakdown

     @staticmethod
     def resolve_lock_minutes(db: Session, unit: Unit, minutes: Optional[int]) -> int:
          """Call value, else tenant lock period, else the configured default."""
          if minutes is not None:
               return minutes
          tenant = unit_store.get_tenant(db, unit.tenant_id)
          return tenant.lock_period_minutes or config.DEFAULT_LOCK_PERIOD_MINUTES

     @staticmethod
     def lock_unit(
          db: Session,
          unit_id: int,
          user_id: str,
          minutes: Optional[int] = None,
          now: Optional[datetime] = None
     ) -> Unit:
          """
          Lock a unit for a potential buyer.

          Raises:
               NotFoundError: If the unit doesn't exist
               ValidationError: If user_id or minutes is invalid
               InvalidTransitionError: If the unit is not available
          """
          try:
               unit = unit_store.get_unit_or_raise(db, unit_id)
               minutes = UnitService.resolve_lock_minutes(db, unit, minutes)
               locked = unit_lifecycle.lock(db, unit_id, user_id, minutes, now=now)
          except InventoryError as e:
               logger.error(f"Error locking unit {unit_id} for user {user_id}: {e}")
               raise

          logger.info(f"Unit {unit_id} locked by {user_id} until {locked.locked_until}")
          return locked

     @staticmethod
     def release_unit(db: Session, unit_id: int) -> Unit:
          """
          Release a locked unit.

          Raises:
               NotFoundError: If the unit doesn't exist
               InvalidTransitionError: If the unit is not locked
          """
          try:
               released = unit_lifecycle.release(db, unit_id)
          except InventoryError as e:
               logger.error(f"Error releasing unit {unit_id}: {e}")
               raise

          logger.info(f"Unit {unit_id} released")
          return released

     @staticmethod
     def change_unit_status(
          db: Session,
          unit_id: int,
          target_status: Union[str, UnitStatus],
          data: Optional[Union[dict, StatusChangeData]] = None,
          now: Optional[datetime] = None
     ) -> Unit:
          """
          Change unit status, dispatching to lock/release/book/cancel/sell.

          Args:
               db: SQLAlchemy database session
               unit_id: ID of the unit
               target_status: available, locked, booked or sold
               data: user_id and minutes (locked) or booking_id (booked)

          Raises:
               NotFoundError: If the unit doesn't exist
               ValidationError: If the target status or data is invalid
               InvalidTransitionError: If the transition is not allowed
          """
          try:
               target = unit_lifecycle.parse_status(target_status)
               payload = UnitService._status_change_data(data)

               unit = UnitService.get_unit(db, unit_id, now=now)
               unit_lifecycle.assert_transition(unit_id, unit.status, target)

               if target == UnitStatus.LOCKED:
                    minutes = UnitService.resolve_lock_minutes(db, unit, payload.minutes)
                    updated = unit_lifecycle.lock(db, unit_id, payload.user_id, minutes, now=now)
               elif target == UnitStatus.BOOKED:
                    updated = unit_lifecycle.book(db, unit_id, payload.booking_id, now=now)
               elif target == UnitStatus.SOLD:
                    updated = unit_lifecycle.sell(db, unit_id)
               elif unit.status == UnitStatus.BOOKED:
                    updated = unit_lifecycle.cancel(db, unit_id)
               else:
                    updated = unit_lifecycle.release(db, unit_id)
          except InventoryError as e:
               logger.error(f"Error changing status of unit {unit_id} to {target_status}: {e}")
               raise

          logger.info(f"Unit {unit_id} status changed to {updated.status.value}")
          return updated

     @staticmethod
     def _status_change_data(data: Optional[Union[dict, StatusChangeData]]) -> StatusChangeData:
          if isinstance(data, StatusChangeData):
               return data
          try:
               return StatusChangeData.model_validate(data or {})
          except PydanticValidationError as e:
               raise ValidationError(f"Invalid status change data: {e}") from e
