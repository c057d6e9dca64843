"""Unit tests for AttributeDefinition and ProductSchema."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from modules.products.attribute_types import AttributeType
from modules.products.exceptions import DuplicateAttributeKeyError, SchemaDefinitionError
from modules.products.schema import AttributeDefinition, ProductSchema

pytestmark = pytest.mark.unit


def _definition(**overrides) -> AttributeDefinition:
    data = {"key": "color", "label": "Color", "type": AttributeType.STRING}
    data.update(overrides)
    return AttributeDefinition(**data)


# ===========================================================================
# AttributeDefinition
# ===========================================================================


class TestAttributeDefinition:
    def test_key_is_normalised(self):
        definition = _definition(key="  Color ")
        assert definition.key == "color"

    def test_type_accepts_case_insensitive_tag(self):
        assert _definition(type="color_hex").type is AttributeType.COLOR_HEX

    @pytest.mark.parametrize("key", ["", "   ", None])
    def test_blank_key_rejected(self, key):
        with pytest.raises(SchemaDefinitionError, match="key"):
            _definition(key=key)

    @pytest.mark.parametrize("label", ["", "  "])
    def test_blank_label_rejected(self, label):
        with pytest.raises(SchemaDefinitionError, match="label") as exc_info:
            _definition(label=label)
        assert exc_info.value.key == "color"

    def test_missing_type_rejected(self):
        with pytest.raises(SchemaDefinitionError, match="no type"):
            _definition(type=None)

    def test_unknown_type_rejected(self):
        with pytest.raises(SchemaDefinitionError, match="unknown type"):
            _definition(type="DATE")

    def test_default_failing_type_check_rejected(self):
        with pytest.raises(SchemaDefinitionError, match="Default value"):
            _definition(type=AttributeType.INTEGER, default_value="8")

    def test_blank_string_default_rejected(self):
        with pytest.raises(SchemaDefinitionError):
            _definition(default_value="  ")

    def test_valid_default_is_accepted_again_by_type(self):
        definition = _definition(type=AttributeType.DOUBLE, default_value=14.0)
        assert definition.type.accepts(definition.default_value)

    def test_list_default_is_frozen(self):
        ports = ["USB-C", "HDMI"]
        definition = _definition(type=AttributeType.LIST_STRING, default_value=ports)
        ports.append("VGA")
        assert definition.default_value == ("USB-C", "HDMI")

    def test_is_immutable(self):
        definition = _definition()
        with pytest.raises(FrozenInstanceError):
            definition.key = "size"

    def test_equality_is_by_key(self):
        a = _definition(key="Color", label="Color")
        b = _definition(key="color", label="Colour", type=AttributeType.COLOR_HEX)
        assert a == b
        assert hash(a) == hash(b)
        assert a != _definition(key="size")

    def test_matches_default_uses_value_equality(self):
        definition = _definition(type=AttributeType.LIST_STRING, default_value=["a", "b"])
        assert definition.matches_default(["a", "b"])
        assert not definition.matches_default(["b", "a"])

    def test_matches_default_false_without_default(self):
        assert not _definition().matches_default("black")

    def test_dict_round_trip(self):
        definition = _definition(
            type=AttributeType.LIST_STRING,
            is_required=True,
            default_value=["USB-C"],
        )
        data = definition.to_dict()
        assert data == {
            "key": "color",
            "label": "Color",
            "type": "LIST_STRING",
            "is_variant_option": False,
            "is_required": True,
            "default_value": ["USB-C"],
        }
        rebuilt = AttributeDefinition.from_dict(data)
        assert rebuilt.default_value == definition.default_value
        assert rebuilt.is_required is True


# ===========================================================================
# ProductSchema
# ===========================================================================


class TestProductSchema:
    def test_preserves_insertion_order(self):
        schema = ProductSchema.with_definitions(
            [_definition(key="size"), _definition(key="color"), _definition(key="fit")]
        )
        assert [d.key for d in schema.definitions()] == ["size", "color", "fit"]

    def test_duplicate_normalised_key_rejected(self):
        with pytest.raises(DuplicateAttributeKeyError) as exc_info:
            ProductSchema.with_definitions(
                [_definition(key="Color"), _definition(key=" color ")]
            )
        assert exc_info.value.key == "color"

    def test_duplicate_key_is_a_schema_definition_error(self):
        assert issubclass(DuplicateAttributeKeyError, SchemaDefinitionError)

    def test_lookup_by_normalised_key(self):
        schema = ProductSchema.with_definitions([_definition(key="Color")])
        assert schema.lookup("color").label == "Color"
        assert schema.lookup("size") is None

    def test_definitions_cannot_be_mutated(self):
        schema = ProductSchema.with_definitions([_definition()])
        with pytest.raises(AttributeError):
            schema.definitions().append(_definition(key="size"))

    def test_list_round_trip(self):
        schema = ProductSchema.with_definitions(
            [_definition(default_value="black"), _definition(key="size", is_variant_option=True)]
        )
        assert ProductSchema.from_list(schema.to_list()) == schema

    def test_from_list_validates_records(self):
        with pytest.raises(SchemaDefinitionError):
            ProductSchema.from_list([{"key": "ram", "label": "RAM", "type": "INTEGER", "default_value": 8.5}])

    def test_empty(self):
        schema = ProductSchema.from_list(None)
        assert len(schema) == 0
        assert schema == ProductSchema.with_definitions(())

    def test_contains(self):
        schema = ProductSchema.with_definitions([_definition()])
        assert "color" in schema
        assert "size" not in schema
