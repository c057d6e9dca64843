"""Product and Variant repository interfaces.

``IProductRepository`` extends ``IRepository[Product]`` with the cached
schema look-up used on every variant write.  ``IVariantRepository``
adds the version-conditioned save that backs optimistic concurrency.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product, Variant
    from modules.products.schema import ProductSchema


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional filters."""

    @abstractmethod
    def exists(self, id: str) -> bool:
        """Return ``True`` when a product with this ID exists."""

    @abstractmethod
    def get_schema(self, id: str) -> Optional[ProductSchema]:
        """Return the product's attribute schema, or ``None`` if absent."""


class IVariantRepository(IRepository["Variant"]):
    """Repository contract for the Variant aggregate."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Variant]:
        """List variants with optional filters."""

    @abstractmethod
    def list_by_product(self, product_id: str) -> List[Variant]:
        """All variants of one product."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Variant]:
        """Retrieve a variant by SKU."""

    @abstractmethod
    def save(self, entity: Variant, expected_version: Optional[int] = None) -> Variant:
        """Insert a new variant, or update one conditioned on its version.

        New variants are inserted with the initial version.  For an
        existing variant the write succeeds only if the stored version
        still equals ``expected_version``; the stored version is then
        incremented.

        Raises:
            ConcurrencyConflictError: the stored version differs.
            VariantNotFound: the variant disappeared before the write.
            VariantAlreadyExists: the SKU is already taken.
        """

    @abstractmethod
    def delete_by_product(self, product_id: str) -> int:
        """Delete every variant of a product; return how many were removed."""
