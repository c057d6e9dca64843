"""Variant attribute resolution.

Turns a caller-supplied attribute map into the minimal map that is
physically stored on a variant:

1. Keys are normalised (trimmed, lower-cased).  Blank keys and keys that
   collide after normalisation are rejected.
2. Every pair is checked in input order: non-null value, key defined in
   the schema, value accepted by the declared type.  Variant-option
   values are always kept; base attributes are kept only when they
   override the schema default.
3. Every required definition must end up with a kept value or a schema
   default.

The resolver holds no state and performs no I/O.  Reading the value a
customer actually sees for a non-overridden key goes through
``effective_attributes``, which overlays the stored map on the schema
defaults.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from modules.products.constants import InvalidAttributeReason
from modules.products.exceptions import InvalidVariantAttributesError
from modules.products.schema import ProductSchema, normalize_key, thaw_value


class VariantAttributeResolver:
    """Validate proposed variant attributes against a ``ProductSchema``."""

    def resolve(
        self, schema: ProductSchema, proposed: Optional[Mapping[str, Any]]
    ) -> Dict[str, Any]:
        """Return the attributes to persist for a variant.

        Raises:
            InvalidVariantAttributesError: blank or colliding key, null
                value, key missing from the schema, value of the wrong
                type, or a required attribute with neither value nor default.
        """
        normalized = self._normalize(proposed or {})

        staged: Dict[str, Any] = {}
        for key, value in normalized.items():
            if value is None:
                raise InvalidVariantAttributesError(key, InvalidAttributeReason.NULL_VALUE)

            definition = schema.lookup(key)
            if definition is None:
                raise InvalidVariantAttributesError(
                    key, InvalidAttributeReason.UNKNOWN_KEY, value
                )

            if not definition.type.accepts(value):
                raise InvalidVariantAttributesError(
                    key, InvalidAttributeReason.INVALID_TYPE, value
                )

            if definition.is_variant_option or not definition.matches_default(value):
                staged[key] = thaw_value(value)

        for definition in schema.definitions():
            if not definition.is_required:
                continue
            if definition.key not in staged and not definition.has_default:
                raise InvalidVariantAttributesError(
                    definition.key, InvalidAttributeReason.MISSING_REQUIRED
                )

        return staged

    @staticmethod
    def _normalize(proposed: Mapping[str, Any]) -> Dict[str, Any]:
        normalized: Dict[str, Any] = {}
        for raw_key, value in proposed.items():
            if not isinstance(raw_key, str) or not raw_key.strip():
                raise InvalidVariantAttributesError(
                    str(raw_key), InvalidAttributeReason.BLANK_KEY, value
                )
            key = normalize_key(raw_key)
            if key in normalized:
                raise InvalidVariantAttributesError(
                    key, InvalidAttributeReason.DUPLICATE_KEY, value
                )
            normalized[key] = value
        return normalized


def effective_attributes(
    schema: ProductSchema, stored: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    """Schema defaults overlaid with a variant's stored values.

    Keys are returned in schema order.  Stored keys that the schema no
    longer defines are ignored.
    """
    stored = stored or {}
    effective: Dict[str, Any] = {}
    for definition in schema.definitions():
        if definition.key in stored:
            effective[definition.key] = stored[definition.key]
        elif definition.has_default:
            effective[definition.key] = thaw_value(definition.default_value)
    return effective

