from .inventory import (
     AmountType,
     UnitStatusEnum,
     FloorRise,
     ViewPremium,
     TowerPremiums,
     TowerSnapshot,
     ProjectSnapshot,
     PremiumAdjustment,
     AdditionalCharge,
     UnitSnapshot,
     UnitResponse,
     StatusChangeData,
     ReclaimResult,
)
from .pricing_rules import (
     EffectiveRules,
     LinearProgression,
     ExponentialProgression,
     TierTableProgression,
     ViewCombination,
     AmountRule,
     FlatTax,
     FixedTax,
     TieredTax,
     AdditionalTax,
)
from .price_breakdown import (
     PremiumLine,
     ChargeLine,
     TaxLine,
     AdditionalTaxLine,
     TaxBreakdown,
     PriceBreakdown,
)

__all__ = [
     "AmountType",
     "UnitStatusEnum",
     "FloorRise",
     "ViewPremium",
     "TowerPremiums",
     "TowerSnapshot",
     "ProjectSnapshot",
     "PremiumAdjustment",
     "AdditionalCharge",
     "UnitSnapshot",
     "UnitResponse",
     "StatusChangeData",
     "ReclaimResult",
     "EffectiveRules",
     "LinearProgression",
     "ExponentialProgression",
     "TierTableProgression",
     "ViewCombination",
     "AmountRule",
     "FlatTax",
     "FixedTax",
     "TieredTax",
     "AdditionalTax",
     "PremiumLine",
     "ChargeLine",
     "TaxLine",
     "AdditionalTaxLine",
     "TaxBreakdown",
     "PriceBreakdown",
]
