"""
Pydantic schemas for pricing rules.

A rule layer (tenant defaults, project model, unit-type rule, call options)
is a plain JSON object. The rule resolver merges the layers and validates
the result into EffectiveRules. Calculation overrides are a closed, tagged
set of strategies selected by ``kind`` and resolved by the calculator's
dispatch tables; no layer can carry executable code.
"""
import re
from decimal import Decimal
from typing import Annotated, Optional, List, Dict, Literal, Union
from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .inventory import AmountType

AreaBasis = Literal["carpet_area", "built_up_area", "super_built_up_area"]


class RuleModel(BaseModel):
     """Rule objects accept camelCase or snake_case keys at every level."""
     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Floor-rise progression strategies
# ---------------------------------------------------------------------------

class LinearProgression(RuleModel):
     """rate = floor_rise.value * floor_difference"""
     kind: Literal["linear"] = "linear"


class ExponentialProgression(RuleModel):
     """rate = floor_rise.value * factor ** (floor_difference - 1)"""
     kind: Literal["exponential"] = "exponential"
     factor: Decimal = Field(..., gt=0)


class FloorTier(RuleModel):
     floor_from: int
     rate: Decimal = Field(..., ge=0)


class TierTableProgression(RuleModel):
     """Flat rate of the highest tier whose floor_from <= unit floor."""
     kind: Literal["tier_table"] = "tier_table"
     tiers: List[FloorTier] = Field(..., min_length=1)


FloorRiseProgression = Annotated[
     Union[LinearProgression, ExponentialProgression, TierTableProgression],
     Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Premium and charge overrides
# ---------------------------------------------------------------------------

class ViewCombination(RuleModel):
     """Extra premium when a unit holds every view in ``views``."""
     views: List[str] = Field(..., min_length=1)
     type: AmountType = AmountType.PERCENTAGE
     value: Decimal = Field(..., ge=0)
     description: Optional[str] = None


class AmountRule(RuleModel):
     """A fixed amount, or a percentage of the unit's base price."""
     type: AmountType
     value: Decimal = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Tax calculation strategies
# ---------------------------------------------------------------------------

class FlatTax(RuleModel):
     kind: Literal["flat"] = "flat"
     rate: Decimal = Field(..., ge=0, le=100)


class FixedTax(RuleModel):
     kind: Literal["fixed"] = "fixed"
     amount: Decimal = Field(..., ge=0)


class TaxTier(RuleModel):
     threshold: Optional[Decimal] = Field(None, description="Upper subtotal bound; null means unbounded")
     rate: Decimal = Field(..., ge=0, le=100)


class TieredTax(RuleModel):
     kind: Literal["tiered"] = "tiered"
     tiers: List[TaxTier] = Field(..., min_length=1)


TaxCalculation = Annotated[
     Union[FlatTax, FixedTax, TieredTax],
     Field(discriminator="kind"),
]


class TaxCalculations(RuleModel):
     """Per-tax overrides; None keeps the project rate."""
     gst: Optional[TaxCalculation] = None
     stamp_duty: Optional[TaxCalculation] = None
     registration: Optional[TaxCalculation] = None


class AdditionalTax(RuleModel):
     name: str
     type: AmountType = AmountType.PERCENTAGE
     value: Decimal = Field(..., ge=0)
     description: Optional[str] = None


# ---------------------------------------------------------------------------
# Effective rules
# ---------------------------------------------------------------------------

class EffectiveRules(RuleModel):
     """The fully merged pricing configuration for one calculation."""
     price_based_on: AreaBasis = "super_built_up_area"
     floor_rise_progression: FloorRiseProgression = Field(default_factory=LinearProgression)
     view_combinations: List[ViewCombination] = Field(default_factory=list)
     premium_calculations: Dict[str, AmountRule] = Field(default_factory=dict)
     charge_overrides: Dict[str, AmountRule] = Field(default_factory=dict)
     tax_calculations: TaxCalculations = Field(default_factory=TaxCalculations)
     additional_taxes: List[AdditionalTax] = Field(default_factory=list)

     # Call-site metadata
     log_calculation: bool = False
     calculated_by: Optional[str] = None

     @field_validator("price_based_on", mode="before")
     @classmethod
     def snake_case_area(cls, v):
          """carpetArea -> carpet_area"""
          if isinstance(v, str):
               return re.sub(r'(?<!^)(?=[A-Z])', '_', v).lower()
          return v

     model_config = ConfigDict(
          extra="ignore",
          json_schema_extra={
               "example": {
                    "price_based_on": "super_built_up_area",
                    "floor_rise_progression": {"kind": "exponential", "factor": 1.05},
                    "view_combinations": [
                         {"views": ["Sea", "Garden"], "type": "percentage", "value": 2}
                    ],
                    "tax_calculations": {
                         "gst": {
                              "kind": "tiered",
                              "tiers": [
                                   {"threshold": 4500000, "rate": 1},
                                   {"threshold": None, "rate": 5}
                              ]
                         }
                    },
                    "additional_taxes": [
                         {"name": "Cess", "type": "percentage", "value": 0.5}
                    ]
               }
          }
     )
