from sqlalchemy import Column, Integer, String, Boolean, JSON
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class Tenant(TimestampMixin, Base):
     """
     Tenant model - the developer organization that owns projects.

     settings holds tenant-wide rules:
          {"business_rules": {"lock_period_minutes": 60, ...},
           "pricing_rules": {...}}   # lowest-precedence pricing layer
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(255), nullable=False)
     domain = Column(String(255), nullable=True, unique=True)
     active = Column(Boolean, default=True, nullable=False)
     settings = Column(JSON, nullable=False, default=dict)

     # Relationships
     projects = relationship("Project", back_populates="tenant")

     @property
     def pricing_rules(self) -> dict:
          return (self.settings or {}).get("pricing_rules") or {}

     @property
     def lock_period_minutes(self):
          """Configured lock duration, or None when the tenant sets none."""
          business_rules = (self.settings or {}).get("business_rules") or {}
          return business_rules.get("lock_period_minutes")

     def __repr__(self):
          return f"<Tenant(id={self.id}, name='{self.name}')>"
