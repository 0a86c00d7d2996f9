"""
Pricing Calculator - itemized price breakdown for a unit.

compute_breakdown(unit, tower, project, rules) is pure and deterministic:
it reads only its arguments, performs no I/O and never rounds. Stored rows
are converted to snapshots with the build_*_snapshot helpers first, which
is where malformed tower/project data is reported as ConfigurationError.

Steps:
1. Base price = rate per sqft x area (area field chosen by price_based_on)
2. Floor-rise premium (linear / exponential / tier-table progression)
3. View premiums, plus view-combination premiums from the rules
4. Premium adjustments (discounts are subtracted)
5. Additional charges (individually overridable by name)
6. Subtotal
7. Taxes (GST, stamp duty, registration, additional named taxes)
8. Total price
"""
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from errors import ConfigurationError
from schemas.inventory import (
     AmountType,
     FloorRise,
     ProjectSnapshot,
     TowerSnapshot,
     UnitSnapshot,
)
from schemas.pricing_rules import AmountRule, EffectiveRules
from schemas.price_breakdown import (
     AdditionalTaxLine,
     ChargeLine,
     PremiumLine,
     PriceBreakdown,
     TaxBreakdown,
     TaxLine,
)

HUNDRED = Decimal("100")


# ---------------------------------------------------------------------------
# Snapshots of stored rows
# ---------------------------------------------------------------------------

def build_unit_snapshot(unit) -> UnitSnapshot:
     """
     Snapshot the pricing fields of a Unit row.

     Raises:
          ConfigurationError: If the stored areas, adjustments or charges are invalid
     """
     try:
          return UnitSnapshot.model_validate({
               "id": unit.id,
               "number": unit.number,
               "unit_type": unit.unit_type,
               "floor": unit.floor,
               "carpet_area": unit.carpet_area,
               "built_up_area": unit.built_up_area,
               "super_built_up_area": unit.super_built_up_area,
               "base_price": unit.base_price,
               "views": unit.views or [],
               "premium_adjustments": unit.premium_adjustments or [],
               "additional_charges": unit.additional_charges or [],
          })
     except PydanticValidationError as e:
          raise ConfigurationError(f"Unit {unit.id} has invalid pricing data: {e}") from e


def build_tower_snapshot(tower) -> TowerSnapshot:
     """
     Snapshot a Tower row.

     Raises:
          ConfigurationError: If the premium configuration is missing or
               malformed. A tower without floor_rise is an inventory data
               problem and is never silently defaulted.
     """
     premiums = tower.premiums or {}
     if not premiums.get("floor_rise"):
          raise ConfigurationError(f"Tower {tower.id} has no floor_rise premium configuration")
     try:
          return TowerSnapshot.model_validate({
               "id": tower.id,
               "name": tower.name,
               "premiums": premiums,
          })
     except PydanticValidationError as e:
          raise ConfigurationError(f"Tower {tower.id} has invalid premium configuration: {e}") from e


def build_project_snapshot(project) -> ProjectSnapshot:
     """
     Snapshot a Project row; unset tax rates fall back to the defaults.

     Raises:
          ConfigurationError: If a tax rate is outside 0-100.
     """
     data = {"id": project.id, "name": project.name}
     for field in ("gst_rate", "stamp_duty_rate", "registration_rate"):
          value = getattr(project, field)
          if value is not None:
               data[field] = value
     try:
          return ProjectSnapshot.model_validate(data)
     except PydanticValidationError as e:
          raise ConfigurationError(f"Project {project.id} has invalid tax rates: {e}") from e


# ---------------------------------------------------------------------------
# Base price
# ---------------------------------------------------------------------------

def calculate_area(unit: UnitSnapshot, rules: EffectiveRules) -> Decimal:
     return getattr(unit, rules.price_based_on)


def calculate_base_price(unit: UnitSnapshot, rules: EffectiveRules) -> Decimal:
     return unit.base_price * calculate_area(unit, rules)


def _apply_amount_rule(rule: AmountRule, base_price: Decimal) -> Decimal:
     if rule.type == AmountType.FIXED:
          return rule.value
     return base_price * rule.value / HUNDRED


# ---------------------------------------------------------------------------
# Floor rise
# ---------------------------------------------------------------------------

def _linear_rate(floor_rise: FloorRise, floor_difference: int, floor: int, progression) -> Decimal:
     return floor_rise.value * floor_difference


def _exponential_rate(floor_rise: FloorRise, floor_difference: int, floor: int, progression) -> Decimal:
     return floor_rise.value * progression.factor ** (floor_difference - 1)


def _tier_table_rate(floor_rise: FloorRise, floor_difference: int, floor: int, progression) -> Decimal:
     applicable = [tier for tier in progression.tiers if tier.floor_from <= floor]
     if not applicable:
          return _linear_rate(floor_rise, floor_difference, floor, progression)
     return max(applicable, key=lambda tier: tier.floor_from).rate


FLOOR_RISE_PROGRESSIONS = {
     "linear": _linear_rate,
     "exponential": _exponential_rate,
     "tier_table": _tier_table_rate,
}


def calculate_floor_rise_premium(
     unit: UnitSnapshot,
     tower: TowerSnapshot,
     rules: EffectiveRules
) -> PremiumLine:
     """Floor-rise premium line; amount is 0 below floor_start."""
     floor_rise = tower.premiums.floor_rise

     if unit.floor < floor_rise.floor_start:
          return PremiumLine(
               type="floor",
               amount=Decimal("0"),
               percentage=None,
               description="No floor rise premium applicable",
          )

     floor_difference = unit.floor - floor_rise.floor_start + 1
     progression = rules.floor_rise_progression
     rate = FLOOR_RISE_PROGRESSIONS[progression.kind](floor_rise, floor_difference, unit.floor, progression)

     if floor_rise.type == AmountType.FIXED:
          return PremiumLine(
               type="floor",
               amount=rate * calculate_area(unit, rules),
               percentage=None,
               description=f"Floor rise premium for floor {unit.floor}",
          )

     return PremiumLine(
          type="floor",
          amount=calculate_base_price(unit, rules) * rate / HUNDRED,
          percentage=rate,
          description=f"Floor rise premium for floor {unit.floor}",
     )


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

def calculate_view_premiums(
     unit: UnitSnapshot,
     tower: TowerSnapshot,
     rules: EffectiveRules,
     base_price: Decimal
) -> list[PremiumLine]:
     """One line per matching view, then one per satisfied view combination."""
     premiums = []

     percentages = {}
     for definition in tower.premiums.view_premium:
          percentages.setdefault(definition.view, definition.percentage)

     unit_views = list(dict.fromkeys(unit.views))
     for view in unit_views:
          percentage = percentages.get(view)
          if percentage is None or percentage <= 0:
               continue
          premiums.append(PremiumLine(
               type="view",
               amount=base_price * percentage / HUNDRED,
               percentage=percentage,
               description=f"Premium for {view} view",
          ))

     held = set(unit_views)
     for combination in rules.view_combinations:
          if not set(combination.views) <= held:
               continue
          is_percentage = combination.type == AmountType.PERCENTAGE
          premiums.append(PremiumLine(
               type="view_combination",
               amount=_apply_amount_rule(combination, base_price),
               percentage=combination.value if is_percentage else None,
               description=combination.description or f"Premium for {' + '.join(combination.views)} views",
          ))

     return premiums


# ---------------------------------------------------------------------------
# Adjustments and charges
# ---------------------------------------------------------------------------

def calculate_additional_premiums(
     unit: UnitSnapshot,
     rules: EffectiveRules,
     base_price: Decimal
) -> list[PremiumLine]:
     """Premium adjustment lines; amounts are positive, including discounts."""
     premiums = []

     for adjustment in unit.premium_adjustments:
          custom = rules.premium_calculations.get(adjustment.type)
          if custom is not None:
               amount = _apply_amount_rule(custom, base_price)
               percentage = custom.value if custom.type == AmountType.PERCENTAGE else None
          elif adjustment.percentage > 0:
               amount = base_price * adjustment.percentage / HUNDRED
               percentage = adjustment.percentage
          else:
               amount = adjustment.amount
               percentage = None

          premiums.append(PremiumLine(
               type=adjustment.type,
               amount=amount,
               percentage=percentage,
               description=adjustment.description or f"{adjustment.type} adjustment",
          ))

     return premiums


def calculate_additional_charges(
     unit: UnitSnapshot,
     rules: EffectiveRules,
     base_price: Decimal
) -> list[ChargeLine]:
     charges = []
     for charge in unit.additional_charges:
          override = rules.charge_overrides.get(charge.name)
          amount = _apply_amount_rule(override, base_price) if override is not None else charge.amount
          charges.append(ChargeLine(
               name=charge.name,
               amount=amount,
               required=charge.required,
               description=charge.description,
          ))
     return charges


# ---------------------------------------------------------------------------
# Taxes
# ---------------------------------------------------------------------------

def _flat_tax(calculation, subtotal: Decimal, default_rate: Decimal) -> TaxLine:
     return TaxLine(rate=calculation.rate, amount=subtotal * calculation.rate / HUNDRED)


def _fixed_tax(calculation, subtotal: Decimal, default_rate: Decimal) -> TaxLine:
     return TaxLine(rate=None, amount=calculation.amount)


def _tiered_tax(calculation, subtotal: Decimal, default_rate: Decimal) -> TaxLine:
     """First tier (ascending threshold, unbounded last) covering the subtotal."""
     tiers = sorted(
          calculation.tiers,
          key=lambda tier: (tier.threshold is None, tier.threshold or Decimal("0")),
     )
     for tier in tiers:
          if tier.threshold is None or tier.threshold >= subtotal:
               return TaxLine(rate=tier.rate, amount=subtotal * tier.rate / HUNDRED)
     return TaxLine(rate=default_rate, amount=subtotal * default_rate / HUNDRED)


TAX_CALCULATORS = {
     "flat": _flat_tax,
     "fixed": _fixed_tax,
     "tiered": _tiered_tax,
}


def _calculate_tax(calculation, subtotal: Decimal, default_rate: Decimal) -> TaxLine:
     if calculation is None:
          return TaxLine(rate=default_rate, amount=subtotal * default_rate / HUNDRED)
     return TAX_CALCULATORS[calculation.kind](calculation, subtotal, default_rate)


def calculate_taxes(
     subtotal: Decimal,
     project: ProjectSnapshot,
     rules: Optional[EffectiveRules] = None
) -> TaxBreakdown:
     """Tax breakdown on the subtotal using project rates unless overridden."""
     rules = rules or EffectiveRules()
     overrides = rules.tax_calculations

     gst = _calculate_tax(overrides.gst, subtotal, project.gst_rate)
     stamp_duty = _calculate_tax(overrides.stamp_duty, subtotal, project.stamp_duty_rate)
     registration = _calculate_tax(overrides.registration, subtotal, project.registration_rate)

     additional_taxes = []
     for tax in rules.additional_taxes:
          if tax.type == AmountType.FIXED:
               amount = tax.value
          else:
               amount = subtotal * tax.value / HUNDRED
          additional_taxes.append(AdditionalTaxLine(
               name=tax.name,
               type=tax.type.value,
               value=tax.value,
               amount=amount,
               description=tax.description,
          ))

     total = gst.amount + stamp_duty.amount + registration.amount
     total += sum((tax.amount for tax in additional_taxes), Decimal("0"))

     return TaxBreakdown(
          gst=gst,
          stamp_duty=stamp_duty,
          registration=registration,
          additional_taxes=additional_taxes,
          total=total,
     )


# ---------------------------------------------------------------------------
# Breakdown
# ---------------------------------------------------------------------------

def compute_breakdown(
     unit: UnitSnapshot,
     tower: TowerSnapshot,
     project: ProjectSnapshot,
     rules: Optional[EffectiveRules] = None
) -> PriceBreakdown:
     """
     Generate a complete price breakdown.

     Args:
          unit: Unit snapshot (rate, areas, floor, views, adjustments, charges)
          tower: Tower snapshot with premium configuration
          project: Project snapshot with tax rates
          rules: Effective rules from the rule resolver (defaults when None)

     Returns:
          PriceBreakdown with subtotal = base + premiums + charges and
          total_price = subtotal + taxes.total
     """
     rules = rules or EffectiveRules()

     area = calculate_area(unit, rules)
     base_price = calculate_base_price(unit, rules)

     premiums = []
     premium_total = Decimal("0")

     floor_premium = calculate_floor_rise_premium(unit, tower, rules)
     if floor_premium.amount > 0:
          premiums.append(floor_premium)
          premium_total += floor_premium.amount

     for premium in calculate_view_premiums(unit, tower, rules, base_price):
          premiums.append(premium)
          premium_total += premium.amount

     for premium in calculate_additional_premiums(unit, rules, base_price):
          premiums.append(premium)
          if premium.type == "discount":
               premium_total -= premium.amount
          else:
               premium_total += premium.amount

     charges = calculate_additional_charges(unit, rules, base_price)
     additional_charges_total = sum((charge.amount for charge in charges), Decimal("0"))

     subtotal = base_price + premium_total + additional_charges_total
     taxes = calculate_taxes(subtotal, project, rules)

     return PriceBreakdown(
          base_price=base_price,
          area_basis=rules.price_based_on,
          area=area,
          premiums=premiums,
          premium_total=premium_total,
          additional_charges=charges,
          additional_charges_total=additional_charges_total,
          subtotal=subtotal,
          taxes=taxes,
          total_price=subtotal + taxes.total,
     )
