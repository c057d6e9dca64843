"""Product attribute schema value objects.

- ``AttributeDefinition``: one immutable schema entry.
- ``ProductSchema``: ordered, key-unique collection of definitions.

Both are plain value objects with no mutation methods; a different
schema means constructing a new one.  Schemas travel to and from
storage as lists of records::

    {"key", "label", "type", "is_variant_option", "is_required", "default_value"}
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from modules.products.attribute_types import AttributeType
from modules.products.exceptions import DuplicateAttributeKeyError, SchemaDefinitionError


def normalize_key(key: str) -> str:
    """Canonical identity of an attribute key (trimmed, lower-cased)."""
    return key.strip().lower()


def freeze_value(value: Any) -> Any:
    """Hashable, order-preserving form of an attribute value."""
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def thaw_value(value: Any) -> Any:
    """JSON-friendly form of an attribute value."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return value


# ---------------------------------------------------------------------------
# AttributeDefinition
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class AttributeDefinition:
    """A single attribute slot in a product schema.

    ``(is_variant_option, is_required)`` combinations:

    ======  ========  ==================================================
    option  required  behaviour
    ======  ========  ==================================================
    yes     yes       caller must supply a value; always persisted
    yes     no        persisted when supplied; never defaulted
    no      yes       default or explicit override must exist
    no      no        persisted only when it differs from the default
    ======  ========  ==================================================

    Two definitions are equal when their normalised keys are equal.

    Raises:
        SchemaDefinitionError: blank key/label, unknown type, or a
            default value the type does not accept.
    """

    key: str
    label: str
    type: AttributeType
    is_variant_option: bool = False
    is_required: bool = False
    default_value: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key.strip():
            raise SchemaDefinitionError("Attribute key must not be blank.")
        key = normalize_key(self.key)

        if not isinstance(self.label, str) or not self.label.strip():
            raise SchemaDefinitionError(
                f"Attribute '{key}' label must not be blank.", key=key
            )

        if self.type is None:
            raise SchemaDefinitionError(f"Attribute '{key}' has no type.", key=key)
        try:
            attr_type = AttributeType(
                self.type.strip().upper() if isinstance(self.type, str) else self.type
            )
        except ValueError:
            raise SchemaDefinitionError(
                f"Attribute '{key}' has unknown type '{self.type}'.", key=key
            ) from None

        default = freeze_value(self.default_value)
        if default is not None and not attr_type.accepts(default):
            raise SchemaDefinitionError(
                f"Default value {self.default_value!r} of attribute '{key}' "
                f"is not a valid {attr_type.describe()}.",
                key=key,
            )

        object.__setattr__(self, "key", key)
        object.__setattr__(self, "label", self.label.strip())
        object.__setattr__(self, "type", attr_type)
        object.__setattr__(self, "is_variant_option", bool(self.is_variant_option))
        object.__setattr__(self, "is_required", bool(self.is_required))
        object.__setattr__(self, "default_value", default)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeDefinition):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    def matches_default(self, value: Any) -> bool:
        """Value equality against the default (``False`` when there is none)."""
        return self.has_default and freeze_value(value) == self.default_value

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "type": self.type.value,
            "is_variant_option": self.is_variant_option,
            "is_required": self.is_required,
            "default_value": thaw_value(self.default_value),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AttributeDefinition:
        return cls(
            key=data.get("key", ""),
            label=data.get("label", ""),
            type=data.get("type"),
            is_variant_option=data.get("is_variant_option", False),
            is_required=data.get("is_required", False),
            default_value=data.get("default_value"),
        )


# ---------------------------------------------------------------------------
# ProductSchema
# ---------------------------------------------------------------------------


class ProductSchema:
    """Ordered collection of ``AttributeDefinition`` indexed by key."""

    __slots__ = ("_definitions", "_index")

    def __init__(self, definitions: Tuple[AttributeDefinition, ...], index: Mapping[str, AttributeDefinition]) -> None:
        self._definitions = definitions
        self._index = MappingProxyType(dict(index))

    @classmethod
    def with_definitions(cls, definitions: Iterable[AttributeDefinition]) -> ProductSchema:
        """Build a schema, rejecting definitions that share a key.

        Raises:
            DuplicateAttributeKeyError: two definitions normalise to the same key.
        """
        ordered: List[AttributeDefinition] = []
        index: Dict[str, AttributeDefinition] = {}
        for definition in definitions:
            if definition.key in index:
                raise DuplicateAttributeKeyError(
                    f"Duplicate attribute key '{definition.key}'.", key=definition.key
                )
            index[definition.key] = definition
            ordered.append(definition)
        return cls(tuple(ordered), index)

    @classmethod
    def from_list(cls, records: Optional[Iterable[Mapping[str, Any]]]) -> ProductSchema:
        """Rebuild a schema from its stored record list."""
        return cls.with_definitions(
            AttributeDefinition.from_dict(record) for record in records or ()
        )

    def to_list(self) -> List[Dict[str, Any]]:
        return [definition.to_dict() for definition in self._definitions]

    def lookup(self, normalized_key: str) -> Optional[AttributeDefinition]:
        return self._index.get(normalized_key)

    def definitions(self) -> Tuple[AttributeDefinition, ...]:
        return self._definitions

    def __iter__(self) -> Iterator[AttributeDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProductSchema):
            return NotImplemented
        return self.to_list() == other.to_list()

    def __repr__(self) -> str:
        return f"ProductSchema(keys={[d.key for d in self._definitions]!r})"
