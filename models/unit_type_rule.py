from sqlalchemy import Column, Integer, String, Boolean, JSON, ForeignKey, UniqueConstraint
from .base import Base, TimestampMixin


class UnitTypeRule(TimestampMixin, Base):
     """
     UnitTypeRule model - pricing overrides for one unit type in a project.
     Inactive rules are ignored by the rule resolver.
     """
     __table_args__ = (
          UniqueConstraint("tenant_id", "project_id", "unit_type", name="uq_unit_type_rules_key"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
     project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
     unit_type = Column(String(100), nullable=False, index=True)
     pricing_rules = Column(JSON, nullable=False, default=dict)
     active = Column(Boolean, default=True, nullable=False)

     def __repr__(self):
          return f"<UnitTypeRule(id={self.id}, unit_type='{self.unit_type}', active={self.active})>"
