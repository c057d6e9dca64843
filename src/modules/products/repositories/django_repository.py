"""Django ORM implementations of the Product and Variant repositories.

Error handling follows the Null Object pattern for reads: look-ups
return ``None`` instead of raising for missing or malformed IDs.  Writes
raise domain exceptions, never HTTP-level ones.

Product schemas are immutable once created, so ``get_schema`` caches the
stored record list in the Django cache and only drops it when the
product is deleted.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import uuid

import structlog
from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.products.constants import INITIAL_VARIANT_VERSION
from modules.products.exceptions import (
    ConcurrencyConflictError,
    VariantAlreadyExists,
    VariantNotFound,
)
from modules.products.models import Product, Variant
from modules.products.repositories.interfaces import (
    IProductRepository,
    IVariantRepository,
)
from modules.products.schema import ProductSchema

logger = structlog.get_logger(__name__)

SCHEMA_CACHE_KEY = "products:schema:{id}"


def schema_cache_key(id: Any) -> Optional[str]:
    """Cache key for a product schema, built from the canonical UUID form.

    Django accepts several spellings of one UUID (dashed, bare hex, upper
    case); all of them map to the same key.  Returns ``None`` when ``id``
    is not a UUID at all.
    """
    try:
        canonical = str(uuid.UUID(str(id)))
    except ValueError:
        return None
    return SCHEMA_CACHE_KEY.format(id=canonical)


# Columns rewritten by a version-conditioned update.
VARIANT_MUTABLE_FIELDS = ("price", "stock", "available", "images", "attributes")


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def exists(self, id: str) -> bool:
        try:
            return Product.objects.filter(id=id).exists()
        except (ValueError, ValidationError):
            return False

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"brand_id": "acme"}
            {"name__icontains": "shirt"}
        """
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def get_schema(self, id: str) -> Optional[ProductSchema]:
        key = schema_cache_key(id)
        if key is None:
            return None
        records = cache.get(key)
        if records is None:
            product = self.get_by_id(id)
            if product is None:
                return None
            records = product.attribute_schema or []
            cache.set(key, records, timeout=settings.SCHEMA_CACHE_TIMEOUT)
            logger.debug("product.schema_cached", product_id=str(id))
        return ProductSchema.from_list(records)

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Delete a product (its variants cascade).

        Returns ``True`` if the product was found and deleted,
        ``False`` if no product exists with the given ID.
        """
        product = self.get_by_id(id)
        if not product:
            return False
        product_id = product.id
        key = schema_cache_key(product_id)
        product.delete()
        # Readers before the commit still see the row and may re-cache it.
        cache.delete(key)
        transaction.on_commit(lambda: cache.delete(key))
        logger.debug("product.row_deleted", product_id=str(product_id))
        return True


class VariantDjangoRepository(IVariantRepository):
    """Concrete Variant repository backed by Django ORM.

    Updates are compare-and-set on ``version``: a single
    ``UPDATE ... WHERE id = %s AND version = %s`` that also increments
    the version, so two writers holding the same version cannot both win.
    """

    def get_by_id(self, id: str) -> Optional[Variant]:
        try:
            return Variant.objects.select_related("product").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Variant]:
        queryset = Variant.objects.select_related("product")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_by_product(self, product_id: str) -> List[Variant]:
        try:
            return self.list({"product_id": product_id})
        except (ValueError, ValidationError):
            return []

    def get_by_sku(self, sku: str) -> Optional[Variant]:
        """Retrieve a variant by SKU (case-insensitive via upper normalisation)."""
        return Variant.objects.filter(sku=sku.strip().upper()).first()

    def save(self, entity: Variant, expected_version: Optional[int] = None) -> Variant:
        if entity.is_persisted:
            return self._update(entity, expected_version)
        return self._insert(entity)

    def _insert(self, entity: Variant) -> Variant:
        entity.version = INITIAL_VARIANT_VERSION
        try:
            with transaction.atomic():
                entity.save(force_insert=True)
        except IntegrityError as exc:
            logger.warning("variant.duplicate_sku", sku=entity.sku)
            raise VariantAlreadyExists(f"SKU '{entity.sku}' already registered.") from exc
        logger.info(
            "variant.saved",
            variant_id=str(entity.id),
            product_id=str(entity.product_id),
            version=entity.version,
        )
        return entity

    def _update(self, entity: Variant, expected_version: Optional[int]) -> Variant:
        if expected_version is None:
            expected_version = entity.version
        log = logger.bind(variant_id=str(entity.id), expected_version=expected_version)

        now = timezone.now()
        values = {field: getattr(entity, field) for field in VARIANT_MUTABLE_FIELDS}
        updated = Variant.objects.filter(id=entity.id, version=expected_version).update(
            **values,
            version=expected_version + 1,
            updated_at=now,
        )
        if updated == 0:
            current = (
                Variant.objects.filter(id=entity.id)
                .values_list("version", flat=True)
                .first()
            )
            if current is None:
                raise VariantNotFound(f"Variant {entity.id} not found.")
            log.warning("variant.version_conflict", current_version=current)
            raise ConcurrencyConflictError(
                str(entity.id), expected_version, current_version=current
            )

        entity.version = expected_version + 1
        entity.updated_at = now
        log.info("variant.saved", version=entity.version)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        variant = self.get_by_id(id)
        if not variant:
            return False
        variant.delete()
        logger.info("variant.deleted", variant_id=str(id))
        return True

    @transaction.atomic
    def delete_by_product(self, product_id: str) -> int:
        count, _ = Variant.objects.filter(product_id=product_id).delete()
        return count
