"""Product and Variant DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views) and the
Service layer.  DTOs are immutable (``frozen=True``).

Attribute values and schema types are passed through untouched
(``Any`` / ``str``): the attribute engine, not Pydantic, decides
whether they are valid, so no coercion happens on the way in.

- ``AttributeDefinitionDTO``: one schema record.
- ``CreateProductDTO`` / ``UpdateProductDTO``: product input.
- ``CreateVariantDTO`` / ``UpdateVariantDTO``: variant input.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.products.constants import (
    PRODUCT_BRAND_ID_MAX_LENGTH,
    PRODUCT_DESCRIPTION_MAX_LENGTH,
    PRODUCT_NAME_MAX_LENGTH,
    VARIANT_SKU_MAX_LENGTH,
)
from modules.products.schema import AttributeDefinition


def _validate_name(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Name must not be empty.")
    v = v.strip()
    if len(v) > PRODUCT_NAME_MAX_LENGTH:
        raise ValueError(
            f"Name must be at most {PRODUCT_NAME_MAX_LENGTH} characters."
        )
    return v


def _validate_brand_id(v: str) -> str:
    if len(v) > PRODUCT_BRAND_ID_MAX_LENGTH:
        raise ValueError(
            f"Brand id must be at most {PRODUCT_BRAND_ID_MAX_LENGTH} characters."
        )
    return v


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class AttributeDefinitionDTO(BaseModel):
    """Schema record as received from the API."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    type: str
    is_variant_option: bool = False
    is_required: bool = False
    default_value: Any = None

    def to_definition(self) -> AttributeDefinition:
        """Build the domain definition.

        Raises:
            SchemaDefinitionError: blank key/label, unknown type or
                invalid default.
        """
        return AttributeDefinition(
            key=self.key,
            label=self.label,
            type=self.type,
            is_variant_option=self.is_variant_option,
            is_required=self.is_required,
            default_value=self.default_value,
        )


# ---------------------------------------------------------------------------
# Variant input
# ---------------------------------------------------------------------------


class CreateVariantDTO(BaseModel):
    """Immutable DTO for variant creation requests.

    Validates:
    - ``sku`` is non-empty (normalised to uppercase).
    - ``price`` is not negative.
    - ``stock`` is not negative.
    """

    model_config = ConfigDict(frozen=True)

    sku: str
    price: Decimal
    stock: int = 0
    available: bool = True
    images: List[str] = Field(default_factory=list)
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("sku")
    @classmethod
    def sku_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("SKU must not be empty.")
        if len(v.strip()) > VARIANT_SKU_MAX_LENGTH:
            raise ValueError(
                f"SKU must be at most {VARIANT_SKU_MAX_LENGTH} characters."
            )
        return v.strip().upper()

    @field_validator("price")
    @classmethod
    def price_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock cannot be negative.")
        return v


class UpdateVariantDTO(BaseModel):
    """Immutable DTO for variant update requests.

    ``expected_version`` is the version the caller read; the update is
    rejected if the variant changed since.  ``attributes`` is the full
    proposed map: when present the stored map is recomputed from it,
    when omitted the stored map is left untouched.
    """

    model_config = ConfigDict(frozen=True)

    expected_version: int
    price: Decimal
    stock: int
    available: bool = True
    images: List[str] = Field(default_factory=list)
    attributes: Optional[Dict[str, Any]] = None

    @field_validator("expected_version")
    @classmethod
    def version_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Expected version must be at least 1.")
        return v

    @field_validator("price")
    @classmethod
    def price_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock cannot be negative.")
        return v


# ---------------------------------------------------------------------------
# Product input
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    ``attribute_definitions`` becomes the product's schema and cannot be
    changed afterwards.  ``initial_variant`` is created in the same
    transaction as the product.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    brand_id: str = ""
    category_ids: List[str] = Field(default_factory=list)
    attribute_definitions: List[AttributeDefinitionDTO] = Field(default_factory=list)
    initial_variant: Optional[CreateVariantDTO] = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("brand_id")
    @classmethod
    def brand_id_max_length(cls, v: str) -> str:
        return _validate_brand_id(v)

    @field_validator("description")
    @classmethod
    def description_max_length(cls, v: str) -> str:
        if len(v) > PRODUCT_DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description must be at most {PRODUCT_DESCRIPTION_MAX_LENGTH} characters."
            )
        return v


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional; only supplied fields are updated.
    The attribute schema is deliberately absent.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None
    brand_id: Optional[str] = None
    category_ids: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_name(v)

    @field_validator("brand_id")
    @classmethod
    def brand_id_max_length(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_brand_id(v)

    @field_validator("description")
    @classmethod
    def description_max_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > PRODUCT_DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description must be at most {PRODUCT_DESCRIPTION_MAX_LENGTH} characters."
            )
        return v
