"""Attribute value kinds for product schemas.

Each ``AttributeType`` member owns a pure predicate ``accepts(value)``
that classifies a candidate value without raising.  The same predicate
is used when a schema default is validated and when a variant value is
resolved, so a default accepted at construction is always accepted
again later.

Kinds:
- ``STRING``: non-blank text.
- ``INTEGER``: an ``int`` (``bool`` is rejected).
- ``DOUBLE``: a ``float`` (no coercion from ``int``).
- ``BOOLEAN``: a ``bool``.
- ``COLOR_HEX``: text matching ``#RGB`` or ``#RRGGBB``.
- ``LIST_STRING``: a list/tuple whose elements are all non-blank text.
"""

from __future__ import annotations

import re
from typing import Any

from django.db import models

HEX_COLOR_PATTERN = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _is_non_blank_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class AttributeType(models.TextChoices):
    STRING = "STRING", "Text"
    INTEGER = "INTEGER", "Integer"
    DOUBLE = "DOUBLE", "Decimal number"
    BOOLEAN = "BOOLEAN", "Boolean"
    COLOR_HEX = "COLOR_HEX", "Hex color"
    LIST_STRING = "LIST_STRING", "List of text"

    def accepts(self, value: Any) -> bool:
        """Return ``True`` when ``value`` belongs to this kind."""
        if self is AttributeType.STRING:
            return _is_non_blank_text(value)
        if self is AttributeType.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        if self is AttributeType.DOUBLE:
            return isinstance(value, float)
        if self is AttributeType.BOOLEAN:
            return isinstance(value, bool)
        if self is AttributeType.COLOR_HEX:
            return isinstance(value, str) and HEX_COLOR_PATTERN.fullmatch(value) is not None
        if self is AttributeType.LIST_STRING:
            return isinstance(value, (list, tuple)) and all(
                _is_non_blank_text(item) for item in value
            )
        return False

    def describe(self) -> str:
        return str(self.label)
