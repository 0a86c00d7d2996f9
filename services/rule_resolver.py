"""
Rule Resolver - merges the four pricing rule layers into EffectiveRules.

Precedence, lowest to highest:
     tenant defaults < project overrides < active unit-type overrides < call options

The merge is shallow per top-level key: a key present in a higher layer
replaces the whole value of the same key from lower layers. Missing layers
are treated as empty. The caller fetches each layer from its store.
"""
import re
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from schemas.pricing_rules import EffectiveRules


def _snake_case(key: str) -> str:
     """priceBasedOn -> price_based_on; snake_case keys pass through."""
     return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def normalize_layer(layer: Optional[dict]) -> dict:
     """Return a copy of a rule layer with snake_case top-level keys."""
     if not layer:
          return {}
     if not isinstance(layer, dict):
          raise ValidationError(f"Pricing rule layer must be an object, got {type(layer).__name__}")
     return {_snake_case(key): value for key, value in layer.items()}


def merge_layers(*layers: Optional[dict]) -> dict:
     """Shallow-merge layers given lowest precedence first."""
     merged = {}
     for layer in layers:
          merged.update(normalize_layer(layer))
     return merged


def resolve(
     tenant_rules: Optional[dict] = None,
     project_rules: Optional[dict] = None,
     unit_type_rules: Optional[dict] = None,
     call_options: Optional[dict] = None
) -> EffectiveRules:
     """
     Merge the rule layers and validate the result.

     Raises:
          ValidationError: If the merged rules are malformed.
     """
     merged = merge_layers(tenant_rules, project_rules, unit_type_rules, call_options)
     try:
          return EffectiveRules.model_validate(merged)
     except PydanticValidationError as e:
          raise ValidationError(f"Invalid pricing rules: {e}") from e
