"""
Error taxonomy for pricing and unit lifecycle operations.

All of these are expected conditions that callers turn into a user-facing
message. Storage errors (SQLAlchemyError) are never wrapped.
"""
from typing import Optional


class InventoryError(Exception):
     """Base exception for inventory core errors"""
     pass


class NotFoundError(InventoryError):
     """Referenced unit, tower, project, tenant or rule does not exist"""

     def __init__(self, entity: str, entity_id):
          self.entity = entity
          self.entity_id = entity_id
          super().__init__(f"{entity} with ID {entity_id} not found")


class ValidationError(InventoryError):
     """Malformed input, e.g. non-positive lock minutes or invalid rule data"""
     pass


class ConfigurationError(InventoryError):
     """Required tower/project pricing data is missing or structurally invalid"""
     pass


class InvalidTransitionError(InventoryError):
     """Status change not permitted from the unit's current state"""

     def __init__(
          self,
          unit_id,
          from_status: Optional[str],
          to_status: str,
          reason: Optional[str] = None
     ):
          self.unit_id = unit_id
          self.from_status = from_status
          self.to_status = to_status
          self.reason = reason
          message = f'Cannot change unit {unit_id} status from "{from_status}" to "{to_status}"'
          if reason:
               message = f"{message}: {reason}"
          super().__init__(message)
