"""Product and Variant models.

Business rules implemented:
- The attribute schema is stored with the product as a JSON document and
  is never rewritten after creation (no service path updates it).
- Variant SKU is unique and normalised to uppercase on save.
- Variant price cannot be negative; stock cannot be negative.
- ``Variant.attributes`` holds only the resolved map (selections and
  overrides); defaults stay on the product schema.
- ``Variant.version`` is an optimistic-lock counter starting at 1.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.products.constants import (
    INITIAL_VARIANT_VERSION,
    PRODUCT_BRAND_ID_MAX_LENGTH,
    PRODUCT_NAME_MAX_LENGTH,
    VARIANT_SKU_MAX_LENGTH,
)

logger = structlog.get_logger(__name__)


class Product(BaseModel):
    """Product aggregate root: base information plus attribute schema."""

    name = models.CharField(max_length=PRODUCT_NAME_MAX_LENGTH)
    description = models.TextField(blank=True, default="")
    brand_id = models.CharField(max_length=PRODUCT_BRAND_ID_MAX_LENGTH, blank=True, default="", db_index=True)
    category_ids = models.JSONField(default=list, blank=True)
    attribute_schema = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.debug(
                "product.inserted",
                product_id=str(self.id),
                name=self.name,
                attribute_count=len(self.attribute_schema or []),
            )

    def __str__(self) -> str:
        return self.name


class Variant(BaseModel):
    """Sellable variant of a product.

    ``attributes`` is written verbatim from the resolver output on
    create/update and is never patched key by key.
    """

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="variants",
    )
    sku = models.CharField(max_length=VARIANT_SKU_MAX_LENGTH, unique=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock = models.PositiveIntegerField(default=0)
    available = models.BooleanField(default=True)
    images = models.JSONField(default=list, blank=True)
    attributes = models.JSONField(default=dict, blank=True)
    version = models.PositiveIntegerField(default=INITIAL_VARIANT_VERSION)

    class Meta:
        db_table = "variants"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="variants_price_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip().upper()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def is_persisted(self) -> bool:
        return not self._state.adding

    def __str__(self) -> str:
        return f"{self.sku} (v{self.version})"
