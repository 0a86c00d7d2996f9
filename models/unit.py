import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime, JSON, Enum, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class UnitStatus(str, enum.Enum):
     """Enumeration for unit sales status."""
     AVAILABLE = "available"
     LOCKED = "locked"
     BOOKED = "booked"
     SOLD = "sold"


class Unit(TimestampMixin, Base):
     """
     Unit model - an individual apartment for sale within a tower.

     status, locked_by, locked_until and booking_id are written only by the
     unit lifecycle (services.unit_lifecycle), always through a conditional
     update on the expected prior status.
     locked_by/locked_until are both set iff status is LOCKED.
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
     tower_id = Column(Integer, ForeignKey("towers.id"), nullable=False, index=True)

     number = Column(String(50), nullable=False)
     unit_type = Column(String(100), nullable=False, index=True)
     floor = Column(Integer, nullable=False)

     # Areas (sqft)
     carpet_area = Column(Numeric(10, 2), nullable=False)
     built_up_area = Column(Numeric(10, 2), nullable=False)
     super_built_up_area = Column(Numeric(10, 2), nullable=False)

     # Rate per sqft
     base_price = Column(Numeric(12, 2), nullable=False)

     views = Column(JSON, nullable=False, default=list)
     premium_adjustments = Column(JSON, nullable=False, default=list)  # [{type, amount, percentage, description}]
     additional_charges = Column(JSON, nullable=False, default=list)  # [{name, amount, required, description}]

     status = Column(
          Enum(
               UnitStatus,
               name="unit_status",
               create_constraint=True,
               values_callable=lambda statuses: [s.value for s in statuses],
          ),
          default=UnitStatus.AVAILABLE,
          nullable=False,
          index=True
     )
     locked_by = Column(String(64), nullable=True)
     locked_until = Column(DateTime, nullable=True, index=True)
     booking_id = Column(String(64), nullable=True)

     # Relationships
     project = relationship("Project", back_populates="units")
     tower = relationship("Tower", back_populates="units")

     def __repr__(self):
          return f"<Unit(id={self.id}, number='{self.number}', status='{self.status.value}')>"

     @property
     def is_available(self) -> bool:
          return self.status == UnitStatus.AVAILABLE

     def is_lock_active(self, now: datetime) -> bool:
          """Check if the unit is locked and the lock has not yet expired."""
          return (
               self.status == UnitStatus.LOCKED
               and self.locked_until is not None
               and self.locked_until >= now
          )
