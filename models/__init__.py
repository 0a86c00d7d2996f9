from .base import Base
from .tenant import Tenant
from .project import Project
from .tower import Tower
from .unit import Unit, UnitStatus
from .unit_type_rule import UnitTypeRule

__all__ = [
     "Base",
     "Tenant",
     "Project",
     "Tower",
     "Unit",
     "UnitStatus",
     "UnitTypeRule",
]
