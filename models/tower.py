from sqlalchemy import Column, Integer, String, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


class Tower(TimestampMixin, Base):
     """
     Tower model - a building within a project.

     premiums holds the tower's premium configuration:
          {"floor_rise": {"type": "fixed", "value": 100, "floor_start": 5},
           "view_premium": [{"view": "Sea", "percentage": 5}]}
     """

     id = Column(Integer, primary_key=True, autoincrement=True)
     project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
     name = Column(String(255), nullable=False)
     total_floors = Column(Integer, nullable=True)
     premiums = Column(JSON, nullable=True)
     active = Column(Boolean, default=True, nullable=False)

     # Relationships
     project = relationship("Project", back_populates="towers")
     units = relationship("Unit", back_populates="tower")

     def __repr__(self):
          return f"<Tower(id={self.id}, name='{self.name}')>"
