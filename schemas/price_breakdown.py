"""
Pydantic schemas for the itemized price breakdown.

A breakdown is derived on demand and never persisted.
"""
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class PremiumLine(BaseModel):
     type: str
     amount: Decimal
     percentage: Optional[Decimal] = None
     description: str


class ChargeLine(BaseModel):
     name: str
     amount: Decimal
     required: bool = True
     description: str = ""


class TaxLine(BaseModel):
     rate: Optional[Decimal] = Field(None, description="Percent applied; null for a fixed amount")
     amount: Decimal


class AdditionalTaxLine(BaseModel):
     name: str
     type: str
     value: Decimal
     amount: Decimal
     description: Optional[str] = None


class TaxBreakdown(BaseModel):
     gst: TaxLine
     stamp_duty: TaxLine
     registration: TaxLine
     additional_taxes: List[AdditionalTaxLine] = Field(default_factory=list)
     total: Decimal


class PriceBreakdown(BaseModel):
     """
     subtotal == base_price + premium_total + additional_charges_total
     total_price == subtotal + taxes.total
     """
     base_price: Decimal
     area_basis: str
     area: Decimal
     premiums: List[PremiumLine] = Field(default_factory=list)
     premium_total: Decimal
     additional_charges: List[ChargeLine] = Field(default_factory=list)
     additional_charges_total: Decimal
     subtotal: Decimal
     taxes: TaxBreakdown
     total_price: Decimal

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "base_price": 10000000,
                    "area_basis": "super_built_up_area",
                    "area": 1000,
                    "premiums": [
                         {
                              "type": "floor",
                              "amount": 800000,
                              "percentage": None,
                              "description": "Floor rise premium for floor 12"
                         }
                    ],
                    "premium_total": 800000,
                    "additional_charges": [],
                    "additional_charges_total": 0,
                    "subtotal": 10800000,
                    "taxes": {
                         "gst": {"rate": 5, "amount": 540000},
                         "stamp_duty": {"rate": 5, "amount": 540000},
                         "registration": {"rate": 1, "amount": 108000},
                         "additional_taxes": [],
                         "total": 1188000
                    },
                    "total_price": 11988000
               }
          }
     )
