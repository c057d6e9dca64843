"""Product service layer (Use Cases).

Orchestrates products, their attribute schema and their variants,
delegating persistence to the injected repositories and attribute
validation to ``VariantAttributeResolver``.

Rules enforced here:
- The schema is built (and validated) once, at product creation; no
  use case rewrites it.
- Variant attributes are always resolved from the full proposed map and
  stored verbatim.
- Variant updates are conditioned on the version the caller read; a
  mismatch surfaces as ``ConcurrencyConflictError`` and is never retried
  here.
- Deleting a product deletes its variants.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.products.exceptions import (
    InvalidVariantAttributesError,
    ProductNotFound,
    VariantAlreadyExists,
    VariantNotFound,
)
from modules.products.models import Product, Variant
from modules.products.resolver import VariantAttributeResolver, effective_attributes
from modules.products.schema import ProductSchema

if TYPE_CHECKING:
    from modules.products.dtos import (
        CreateProductDTO,
        CreateVariantDTO,
        UpdateProductDTO,
        UpdateVariantDTO,
    )
    from modules.products.repositories.interfaces import (
        IProductRepository,
        IVariantRepository,
    )

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product and Variant use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        product_repository: IProductRepository,
        variant_repository: IVariantRepository,
        resolver: Optional[VariantAttributeResolver] = None,
    ) -> None:
        self._product_repo = product_repository
        self._variant_repo = variant_repository
        self._resolver = resolver or VariantAttributeResolver()

    # ------------------------------------------------------------------
    # Product commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a product with its attribute schema.

        When ``dto.initial_variant`` is given it is created in the same
        transaction; if it fails, the product is rolled back too.

        Raises:
            SchemaDefinitionError: malformed schema definition.
            DuplicateAttributeKeyError: two definitions share a key.
            InvalidVariantAttributesError: initial variant is invalid.
            VariantAlreadyExists: initial variant SKU is taken.
        """
        log = logger.bind(name=dto.name)

        schema = ProductSchema.with_definitions(
            definition.to_definition() for definition in dto.attribute_definitions
        )
        product = Product(
            name=dto.name,
            description=dto.description,
            brand_id=dto.brand_id,
            category_ids=list(dto.category_ids),
            attribute_schema=schema.to_list(),
        )
        product = self._product_repo.save(product)
        log.info("product.created", product_id=str(product.id), attributes=len(schema))

        if dto.initial_variant is not None:
            self._create_variant(product, schema, dto.initial_variant)
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Update base product information.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._product_repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        for field in ("name", "description", "brand_id", "category_ids"):
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)

        product = self._product_repo.save(product)
        logger.info("product.updated", product_id=str(id))
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        """Delete a product and every variant it owns.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        if not self._product_repo.exists(id):
            raise ProductNotFound(f"Product {id} not found.")
        removed = self._variant_repo.delete_by_product(id)
        self._product_repo.delete(id)
        logger.info("product.deleted", product_id=str(id), variants_removed=removed)

    # ------------------------------------------------------------------
    # Product queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._product_repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """Return a list of products, optionally filtered."""
        return self._product_repo.list(filters)

    def get_schema(self, product_id: str) -> ProductSchema:
        """Return the immutable attribute schema of a product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        schema = self._product_repo.get_schema(product_id)
        if schema is None:
            raise ProductNotFound(f"Product {product_id} not found.")
        return schema

    # ------------------------------------------------------------------
    # Variant commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_variant(self, product_id: str, dto: CreateVariantDTO) -> Variant:
        """Create a variant whose attributes conform to the product schema.

        Raises:
            ProductNotFound: if the product does not exist.
            InvalidVariantAttributesError: attributes fail resolution.
            VariantAlreadyExists: SKU already registered.
        """
        product = self.get_product(product_id)
        schema = self.get_schema(product_id)
        return self._create_variant(product, schema, dto)

    @transaction.atomic
    def update_variant(self, variant_id: str, dto: UpdateVariantDTO) -> Variant:
        """Replace a variant's commercial data and, optionally, its attributes.

        The write only lands if the stored version still equals
        ``dto.expected_version``.

        Raises:
            VariantNotFound: if the variant does not exist.
            InvalidVariantAttributesError: attributes fail resolution.
            ConcurrencyConflictError: the variant changed since it was read.
        """
        variant = self.get_variant(variant_id)
        log = logger.bind(variant_id=str(variant_id), expected_version=dto.expected_version)

        if dto.attributes is not None:
            schema = self.get_schema(str(variant.product_id))
            variant.attributes = self._resolve(schema, dto.attributes, log)

        variant.price = dto.price
        variant.stock = dto.stock
        variant.available = dto.available
        variant.images = list(dto.images)

        variant = self._variant_repo.save(variant, expected_version=dto.expected_version)
        log.info("variant.updated", version=variant.version)
        return variant

    @transaction.atomic
    def delete_variant(self, id: str) -> None:
        """Delete a variant.

        Raises:
            VariantNotFound: if the variant does not exist.
        """
        if not self._variant_repo.delete(id):
            raise VariantNotFound(f"Variant {id} not found.")
        logger.info("variant.deleted", variant_id=str(id))

    # ------------------------------------------------------------------
    # Variant queries
    # ------------------------------------------------------------------

    def get_variant(self, id: str) -> Variant:
        """Retrieve a single variant by ID.

        Raises:
            VariantNotFound: if the variant does not exist.
        """
        variant = self._variant_repo.get_by_id(id)
        if not variant:
            raise VariantNotFound(f"Variant {id} not found.")
        return variant

    def list_variants(self, product_id: str) -> List[Variant]:
        """Return the variants of a product.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        if not self._product_repo.exists(product_id):
            raise ProductNotFound(f"Product {product_id} not found.")
        return self._variant_repo.list_by_product(product_id)

    def effective_attributes(self, variant: Variant) -> Dict[str, Any]:
        """Attribute values as seen by a customer: defaults plus overrides."""
        schema = self.get_schema(str(variant.product_id))
        return effective_attributes(schema, variant.attributes)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _create_variant(
        self, product: Product, schema: ProductSchema, dto: CreateVariantDTO
    ) -> Variant:
        log = logger.bind(product_id=str(product.id), sku=dto.sku)

        if self._variant_repo.get_by_sku(dto.sku):
            log.warning("variant.duplicate_sku")
            raise VariantAlreadyExists(f"SKU '{dto.sku}' already registered.")

        variant = Variant(
            product=product,
            sku=dto.sku,
            price=dto.price,
            stock=dto.stock,
            available=dto.available,
            images=list(dto.images),
            attributes=self._resolve(schema, dto.attributes, log),
        )
        variant = self._variant_repo.save(variant)
        log.info("variant.created", variant_id=str(variant.id))
        return variant

    def _resolve(self, schema: ProductSchema, proposed: Dict[str, Any], log) -> Dict[str, Any]:
        try:
            resolved = self._resolver.resolve(schema, proposed)
        except InvalidVariantAttributesError as exc:
            log.warning("variant.invalid_attributes", key=exc.key, reason=str(exc.reason))
            raise
        log.debug(
            "variant.attributes_resolved",
            proposed=len(proposed),
            stored=sorted(resolved),
        )
        return resolved
