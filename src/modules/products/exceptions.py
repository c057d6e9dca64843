"""Product domain exceptions.

Raised by the attribute engine and the Service Layer when business
rules are violated.  The API layer (Views) catches these and translates
them into appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Any, Optional

from modules.products.constants import InvalidAttributeReason


class ProductNotFound(Exception):
    """The requested product does not exist."""


class VariantNotFound(Exception):
    """The requested variant does not exist."""


class VariantAlreadyExists(Exception):
    """A variant with the same SKU already exists."""


# ---------------------------------------------------------------------------
# Attribute engine
# ---------------------------------------------------------------------------


class SchemaDefinitionError(Exception):
    """Malformed product schema detected at construction time.

    Never recoverable: the product creation request must be rejected.
    """

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class DuplicateAttributeKeyError(SchemaDefinitionError):
    """Two schema definitions normalise to the same key."""


class InvalidVariantAttributesError(Exception):
    """Proposed variant attributes do not conform to the product schema.

    ``reason`` is an ``InvalidAttributeReason`` code.  ``value`` is the
    offending value when one exists (``None`` for missing/null cases).
    """

    def __init__(self, key: str, reason: str, value: Any = None) -> None:
        self.key = key
        self.reason = reason
        self.value = value
        super().__init__(f"Attribute '{key}': {InvalidAttributeReason(reason).label}.")


class ConcurrencyConflictError(Exception):
    """The variant was modified by someone else since it was read.

    Recoverable: the caller re-reads the variant and recomputes.
    """

    def __init__(
        self,
        variant_id: str,
        expected_version: int,
        current_version: Optional[int] = None,
    ) -> None:
        self.variant_id = variant_id
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Variant {variant_id} was modified concurrently "
            f"(expected version {expected_version}, current {current_version})."
        )
