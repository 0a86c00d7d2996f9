"""Pricing rule service tests: storing and reading rule layers."""

import pytest

from errors import NotFoundError, ValidationError
from models import Tenant
from services import pricing_rule_service


class TestTenantAndProjectRules:
    def test_tenant_rules_are_normalized(self, db, tenant):
        tenant.settings = {"business_rules": {"lock_period_minutes": 45}}
        db.commit()

        stored = pricing_rule_service.set_tenant_pricing_rules(db, tenant.id, {"priceBasedOn": "carpet_area"})

        assert stored == {"price_based_on": "carpet_area"}
        assert tenant.settings["pricing_rules"] == {"price_based_on": "carpet_area"}
        assert tenant.lock_period_minutes == 45

    def test_invalid_project_rules_are_rejected(self, db, project):
        project.custom_pricing_model = {"price_based_on": "carpet_area"}
        db.commit()

        with pytest.raises(ValidationError):
            pricing_rule_service.set_project_pricing_model(
                db, project.id, {"floor_rise_progression": {"kind": "exponential", "factor": -1}}
            )

        assert project.custom_pricing_model == {"price_based_on": "carpet_area"}

    def test_clear_project_rules(self, db, project):
        pricing_rule_service.set_project_pricing_model(db, project.id, {"price_based_on": "carpet_area"})
        pricing_rule_service.set_project_pricing_model(db, project.id, None)

        assert project.custom_pricing_model is None

    def test_unknown_tenant(self, db):
        with pytest.raises(NotFoundError, match="Tenant with ID 77 not found"):
            pricing_rule_service.set_tenant_pricing_rules(db, 77, {})


class TestUnitTypeRules:
    def test_create_then_update_keeps_active_flag(self, db, tenant, project):
        rule = pricing_rule_service.set_unit_type_pricing_rules(
            db, tenant.id, project.id, "2BHK", {"price_based_on": "carpet_area"}
        )
        assert rule.active is True

        pricing_rule_service.set_unit_type_pricing_rules(
            db, tenant.id, project.id, "2BHK", {"price_based_on": "carpet_area"}, active=False
        )
        updated = pricing_rule_service.set_unit_type_pricing_rules(
            db, tenant.id, project.id, "2BHK", {"price_based_on": "built_up_area"}
        )

        assert updated.id == rule.id
        assert updated.active is False
        assert updated.pricing_rules == {"price_based_on": "built_up_area"}

    def test_project_of_another_tenant(self, db, tenant, project):
        with pytest.raises(NotFoundError):
            pricing_rule_service.set_unit_type_pricing_rules(db, tenant.id + 1, project.id, "2BHK", {})

    def test_delete(self, db, tenant, project):
        pricing_rule_service.set_unit_type_pricing_rules(db, tenant.id, project.id, "2BHK", {})

        pricing_rule_service.delete_unit_type_rule(db, tenant.id, project.id, "2BHK")

        assert pricing_rule_service.get_unit_type_rule(db, tenant.id, project.id, "2BHK") is None
        with pytest.raises(NotFoundError):
            pricing_rule_service.delete_unit_type_rule(db, tenant.id, project.id, "2BHK")


class TestGetPricingRules:
    def test_layers_and_merged(self, db, tenant, project):
        pricing_rule_service.set_tenant_pricing_rules(db, tenant.id, {"price_based_on": "carpet_area", "calculated_by": "ops"})
        pricing_rule_service.set_project_pricing_model(db, project.id, {"price_based_on": "built_up_area"})
        pricing_rule_service.set_unit_type_pricing_rules(
            db, tenant.id, project.id, "3BHK", {"price_based_on": "super_built_up_area"}
        )

        rules = pricing_rule_service.get_pricing_rules(db, tenant.id, project.id, "3BHK")

        assert rules["tenant"]["price_based_on"] == "carpet_area"
        assert rules["project"] == {"price_based_on": "built_up_area"}
        assert rules["unit_type_active"] is True
        assert rules["merged"].price_based_on == "super_built_up_area"
        assert rules["merged"].calculated_by == "ops"

    def test_inactive_rule_left_out_of_merge(self, db, tenant, project):
        pricing_rule_service.set_project_pricing_model(db, project.id, {"price_based_on": "built_up_area"})
        pricing_rule_service.set_unit_type_pricing_rules(
            db, tenant.id, project.id, "3BHK", {"price_based_on": "carpet_area"}, active=False
        )

        rules = pricing_rule_service.get_pricing_rules(db, tenant.id, project.id, "3BHK")

        assert rules["unit_type"] == {"price_based_on": "carpet_area"}
        assert rules["merged"].price_based_on == "built_up_area"

    def test_without_unit_type(self, db, tenant, project):
        rules = pricing_rule_service.get_pricing_rules(db, tenant.id, project.id)

        assert rules["unit_type"] == {}
        assert rules["unit_type_active"] is None
        assert rules["merged"].price_based_on == "super_built_up_area"

    def test_unknown_project(self, db, tenant):
        with pytest.raises(NotFoundError):
            pricing_rule_service.get_pricing_rules(db, tenant.id, 404)

    def test_project_of_another_tenant(self, db, project):
        other = Tenant(name="Harbour Realty", domain="harbour.example.com", settings={})
        db.add(other)
        db.commit()

        with pytest.raises(NotFoundError, match=f"Project with ID {project.id} not found"):
            pricing_rule_service.get_pricing_rules(db, other.id, project.id)
