from sqlalchemy import Column, Integer, String, Numeric, Text, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class Project(TimestampMixin, Base):
     """
     Project model - a real estate development made of one or more towers.
     Carries the tax rates applied to every unit price in the project.
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
     name = Column(String(255), nullable=False)
     city = Column(String(100), nullable=True)
     address = Column(Text, nullable=True)

     # Tax rates (percent)
     gst_rate = Column(Numeric(5, 2), default=5, nullable=True)
     stamp_duty_rate = Column(Numeric(5, 2), default=5, nullable=True)
     registration_rate = Column(Numeric(5, 2), default=1, nullable=True)

     # Partial pricing rule overrides (second-lowest precedence)
     custom_pricing_model = Column(JSON, nullable=True)

     active = Column(Boolean, default=True, nullable=False)

     # Relationships
     tenant = relationship("Tenant", back_populates="projects")
     towers = relationship("Tower", back_populates="project", cascade="all, delete-orphan")
     units = relationship("Unit", back_populates="project")

     def __repr__(self):
          return f"<Project(id={self.id}, name='{self.name}')>"
