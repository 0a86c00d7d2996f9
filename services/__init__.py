from .rule_resolver import resolve, merge_layers, normalize_layer
from .pricing_calculator import compute_breakdown
from .unit_service import UnitService
from .lock_reclaimer import reclaim_expired_locks, LockReclaimer
from .pricing_rule_service import (
     set_tenant_pricing_rules,
     set_project_pricing_model,
     set_unit_type_pricing_rules,
     get_pricing_rules,
     delete_unit_type_rule,
)

__all__ = [
     "resolve",
     "merge_layers",
     "normalize_layer",
     "compute_breakdown",
     "UnitService",
     "reclaim_expired_locks",
     "LockReclaimer",
     "set_tenant_pricing_rules",
     "set_project_pricing_model",
     "set_unit_type_pricing_rules",
     "get_pricing_rules",
     "delete_unit_type_rule",
]
