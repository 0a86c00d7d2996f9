"""
Pydantic snapshots of inventory entities, as consumed by the pricing calculator.

The calculator never sees ORM objects: services build these snapshots from
the stored rows so that pricing stays a pure function of its inputs.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator


class AmountType(str, Enum):
     """How a configured value is applied."""
     FIXED = "fixed"
     PERCENTAGE = "percentage"


class UnitStatusEnum(str, Enum):
     """Unit sales status options."""
     AVAILABLE = "available"
     LOCKED = "locked"
     BOOKED = "booked"
     SOLD = "sold"


class FloorRise(BaseModel):
     """Tower floor-rise configuration."""
     type: AmountType = AmountType.FIXED
     value: Decimal = Field(default=Decimal("0"), ge=0)
     floor_start: int = Field(default=1, description="First floor that carries the premium")


class ViewPremium(BaseModel):
     view: str
     percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class TowerPremiums(BaseModel):
     floor_rise: FloorRise
     view_premium: List[ViewPremium] = Field(default_factory=list)


class TowerSnapshot(BaseModel):
     id: Optional[int] = None
     name: Optional[str] = None
     premiums: TowerPremiums


class ProjectSnapshot(BaseModel):
     """Project tax rates in percent; missing rates fall back to 5 / 5 / 1."""
     id: Optional[int] = None
     name: Optional[str] = None
     gst_rate: Decimal = Field(default=Decimal("5"), ge=0, le=100)
     stamp_duty_rate: Decimal = Field(default=Decimal("5"), ge=0, le=100)
     registration_rate: Decimal = Field(default=Decimal("1"), ge=0, le=100)


class PremiumAdjustment(BaseModel):
     type: str
     amount: Decimal = Decimal("0")
     percentage: Decimal = Decimal("0")
     description: str = ""

     @field_validator("amount", "percentage", mode="before")
     @classmethod
     def null_amount_is_zero(cls, v):
          return Decimal("0") if v is None else v

     @field_validator("description", mode="before")
     @classmethod
     def null_description_is_empty(cls, v):
          return "" if v is None else v


class AdditionalCharge(BaseModel):
     name: str
     amount: Decimal = Field(..., ge=0)
     required: bool = True
     description: str = ""

     @field_validator("amount", mode="before")
     @classmethod
     def null_amount_is_zero(cls, v):
          return Decimal("0") if v is None else v

     @field_validator("description", mode="before")
     @classmethod
     def null_description_is_empty(cls, v):
          return "" if v is None else v


class UnitSnapshot(BaseModel):
     """The pricing-relevant fields of a unit."""
     id: Optional[int] = None
     number: Optional[str] = None
     unit_type: Optional[str] = None
     floor: int
     carpet_area: Decimal = Field(..., ge=0)
     built_up_area: Decimal = Field(..., ge=0)
     super_built_up_area: Decimal = Field(..., ge=0)
     base_price: Decimal = Field(..., ge=0, description="Rate per sqft")
     views: List[str] = Field(default_factory=list)
     premium_adjustments: List[PremiumAdjustment] = Field(default_factory=list)
     additional_charges: List[AdditionalCharge] = Field(default_factory=list)


class UnitResponse(BaseModel):
     """Schema for a unit after a lifecycle operation."""
     id: int
     number: str
     unit_type: str
     floor: int
     status: UnitStatusEnum
     locked_by: Optional[str] = None
     locked_until: Optional[datetime] = None
     booking_id: Optional[str] = None

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 1,
                    "number": "A-1201",
                    "unit_type": "3BHK",
                    "floor": 12,
                    "status": "locked",
                    "locked_by": "agent-7",
                    "locked_until": "2026-01-31T11:30:00",
                    "booking_id": None
               }
          }
     )


class StatusChangeData(BaseModel):
     """Extra data for change_unit_status, depending on the target status."""
     user_id: Optional[str] = None
     booking_id: Optional[str] = None
     minutes: Optional[int] = None


class ReclaimResult(BaseModel):
     """Outcome of one expired-lock sweep."""
     released_count: int = 0
