"""Rule resolver tests: layer precedence, key normalization, validation."""

from decimal import Decimal

import pytest

from errors import ValidationError
from services.rule_resolver import merge_layers, normalize_layer, resolve


class TestPrecedence:
    def test_missing_layers_give_defaults(self):
        rules = resolve(None, None, None, None)

        assert rules.price_based_on == "super_built_up_area"
        assert rules.floor_rise_progression.kind == "linear"
        assert rules.view_combinations == []
        assert rules.tax_calculations.gst is None
        assert rules.log_calculation is False

    def test_higher_layer_wins(self):
        rules = resolve(
            {"price_based_on": "carpet_area", "additional_taxes": [{"name": "Cess", "value": 1}]},
            {"price_based_on": "built_up_area"},
            {"floor_rise_progression": {"kind": "exponential", "factor": "1.1"}},
            {"price_based_on": "super_built_up_area"},
        )

        assert rules.price_based_on == "super_built_up_area"
        assert rules.floor_rise_progression.kind == "exponential"
        assert rules.floor_rise_progression.factor == Decimal("1.1")
        assert [tax.name for tax in rules.additional_taxes] == ["Cess"]

    def test_unit_type_layer_beats_project(self):
        rules = resolve(None, {"price_based_on": "carpet_area"}, {"price_based_on": "built_up_area"}, None)

        assert rules.price_based_on == "built_up_area"

    def test_merge_is_shallow(self):
        rules = resolve(
            {"tax_calculations": {"gst": {"kind": "flat", "rate": 12}}},
            {"tax_calculations": {"stamp_duty": {"kind": "flat", "rate": 6}}},
        )

        assert rules.tax_calculations.gst is None
        assert rules.tax_calculations.stamp_duty.rate == Decimal("6")

    def test_merge_layers_order(self):
        merged = merge_layers({"a": 1, "b": 1}, None, {}, {"b": 2})

        assert merged == {"a": 1, "b": 2}


class TestNormalization:
    def test_camel_case_keys(self):
        layer = normalize_layer({
            "priceBasedOn": "carpet_area",
            "floorRiseProgression": {"kind": "linear"},
            "gst": 1,
        })

        assert set(layer) == {"price_based_on", "floor_rise_progression", "gst"}

    def test_camel_and_snake_layers_merge(self):
        rules = resolve({"price_based_on": "carpet_area"}, {"priceBasedOn": "built_up_area"})

        assert rules.price_based_on == "built_up_area"

    def test_unknown_keys_are_ignored(self):
        rules = resolve({"enable_loyalty_points": True}, None, None, {"calculatedBy": "agent-7", "logCalculation": True})

        assert rules.calculated_by == "agent-7"
        assert rules.log_calculation is True
        assert not hasattr(rules, "enable_loyalty_points")

    def test_nested_camel_case_keys(self):
        rules = resolve(None, None, None, {
            "taxCalculations": {"stampDuty": {"kind": "flat", "rate": 10}},
            "floorRiseProgression": {"kind": "tier_table", "tiers": [{"floorFrom": 10, "rate": 150}]},
            "additionalTaxes": [{"name": "Cess", "value": 1}],
        })

        assert rules.tax_calculations.stamp_duty.rate == Decimal("10")
        assert rules.floor_rise_progression.tiers[0].floor_from == 10
        assert rules.additional_taxes[0].name == "Cess"

    def test_camel_case_area_basis(self):
        rules = resolve(None, None, {"priceBasedOn": "carpetArea"}, None)

        assert rules.price_based_on == "carpet_area"
        assert resolve({"price_based_on": "superBuiltUpArea"}).price_based_on == "super_built_up_area"


class TestInvalidRules:
    def test_unknown_area_basis(self):
        with pytest.raises(ValidationError, match="Invalid pricing rules"):
            resolve({"price_based_on": "plot_area"})

    def test_layer_must_be_object(self):
        with pytest.raises(ValidationError, match="must be an object"):
            resolve(["price_based_on"])

    def test_exponential_factor_must_be_positive(self):
        with pytest.raises(ValidationError):
            resolve(None, None, None, {"floor_rise_progression": {"kind": "exponential", "factor": 0}})

    def test_unknown_progression_kind(self):
        with pytest.raises(ValidationError):
            resolve({"floor_rise_progression": {"kind": "quadratic"}})

    def test_unknown_tax_kind(self):
        with pytest.raises(ValidationError):
            resolve({"tax_calculations": {"gst": {"kind": "sliding", "rate": 5}}})
