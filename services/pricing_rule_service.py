# services/pricing_rule_service.py
"""
Pricing Rule Service - maintains the stored pricing rule layers.

Layers live in three places:
- tenant.settings["pricing_rules"]         (tenant defaults)
- project.custom_pricing_model             (project overrides)
- unit_type_rules.pricing_rules            (per unit type, may be inactive)

Every payload is normalized to snake_case keys and validated as
EffectiveRules before it is stored. Functions flush but never commit.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from errors import NotFoundError
from models import UnitTypeRule
from . import rule_resolver, unit_store

logger = logging.getLogger(__name__)


def validate_rules(rules: Optional[dict]) -> dict:
     """
     Normalize a rule layer and check it resolves to valid EffectiveRules.

     Raises:
          ValidationError: If the layer is not an object or its values are invalid
     """
     layer = rule_resolver.normalize_layer(rules)
     rule_resolver.resolve(layer)
     return layer


def set_tenant_pricing_rules(db: Session, tenant_id: int, rules: Optional[dict]) -> dict:
     """Replace the tenant-wide pricing rules."""
     layer = validate_rules(rules)
     tenant = unit_store.get_tenant(db, tenant_id)
     # JSON columns are not mutation-tracked; assign a new dict
     tenant.settings = {**(tenant.settings or {}), "pricing_rules": layer}
     db.flush()
     logger.info(f"Updated pricing rules for tenant {tenant_id}")
     return layer


def set_project_pricing_model(db: Session, project_id: int, rules: Optional[dict]) -> dict:
     """Replace the project's custom pricing model."""
     layer = validate_rules(rules)
     project = unit_store.get_project(db, project_id)
     project.custom_pricing_model = layer or None
     db.flush()
     logger.info(f"Updated custom pricing model for project {project_id}")
     return layer


def get_unit_type_rule(
     db: Session,
     tenant_id: int,
     project_id: int,
     unit_type: str
) -> Optional[UnitTypeRule]:
     """Stored rule for (tenant, project, unit type), active or not."""
     return db.query(UnitTypeRule).filter(
          UnitTypeRule.tenant_id == tenant_id,
          UnitTypeRule.project_id == project_id,
          UnitTypeRule.unit_type == unit_type
     ).first()


def set_unit_type_pricing_rules(
     db: Session,
     tenant_id: int,
     project_id: int,
     unit_type: str,
     rules: Optional[dict],
     active: Optional[bool] = None
) -> UnitTypeRule:
     """
     Create or update the pricing rules for one unit type in a project.

     Args:
          db: SQLAlchemy database session
          tenant_id: Owning tenant
          project_id: Project the unit type belongs to
          unit_type: Unit type label (e.g. "2BHK")
          rules: Rule layer to store
          active: New active flag; None keeps the current value (new rules are active)

     Returns:
          The stored UnitTypeRule

     Raises:
          NotFoundError: If the project doesn't exist or belongs to another tenant
          ValidationError: If the rules are invalid
     """
     layer = validate_rules(rules)
     project = unit_store.get_project(db, project_id)
     if project.tenant_id != tenant_id:
          raise NotFoundError("Project", project_id)

     rule = get_unit_type_rule(db, tenant_id, project_id, unit_type)
     if rule is None:
          rule = UnitTypeRule(
               tenant_id=tenant_id,
               project_id=project_id,
               unit_type=unit_type,
               pricing_rules=layer,
               active=True if active is None else active
          )
          db.add(rule)
          logger.info(f"Created pricing rules for unit type {unit_type} in project {project_id}")
     else:
          rule.pricing_rules = layer
          if active is not None:
               rule.active = active
          logger.info(f"Updated pricing rules for unit type {unit_type} in project {project_id}")

     db.flush()
     return rule


def delete_unit_type_rule(db: Session, tenant_id: int, project_id: int, unit_type: str) -> None:
     """
     Raises:
          NotFoundError: If no rule is stored for the unit type
     """
     rule = get_unit_type_rule(db, tenant_id, project_id, unit_type)
     if rule is None:
          raise NotFoundError("UnitTypeRule", f"{project_id}/{unit_type}")
     db.delete(rule)
     db.flush()
     logger.info(f"Deleted pricing rules for unit type {unit_type} in project {project_id}")


def get_pricing_rules(
     db: Session,
     tenant_id: int,
     project_id: int,
     unit_type: Optional[str] = None
) -> dict:
     """
     Stored layers plus the rules they resolve to (no call options).

     Returns:
          {"tenant": {...}, "project": {...}, "unit_type": {...}, "merged": EffectiveRules}
          An inactive unit type rule is reported but left out of the merge.

     Raises:
          NotFoundError: If the tenant or project doesn't exist, or the project
               belongs to another tenant
     """
     tenant = unit_store.get_tenant(db, tenant_id)
     project = unit_store.get_project(db, project_id)
     if project.tenant_id != tenant_id:
          raise NotFoundError("Project", project_id)
     rule = get_unit_type_rule(db, tenant_id, project_id, unit_type) if unit_type else None

     tenant_layer = tenant.pricing_rules
     project_layer = project.custom_pricing_model or {}
     unit_type_layer = rule.pricing_rules if rule else {}

     return {
          "tenant": tenant_layer,
          "project": project_layer,
          "unit_type": unit_type_layer,
          "unit_type_active": rule.active if rule else None,
          "merged": rule_resolver.resolve(
               tenant_layer,
               project_layer,
               unit_type_layer if rule and rule.active else None,
          ),
     }
