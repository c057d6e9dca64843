"""Unit tests for ProductDjangoRepository and VariantDjangoRepository.

Covers:
- CRUD operations and look-ups (invalid UUIDs return ``None``).
- Cached schema reads and eviction on delete.
- Variant insert with initial version, duplicate SKU.
- Version-conditioned updates: success, stale version, vanished row.
"""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest
from django.core.cache import cache

from modules.products.exceptions import (
    ConcurrencyConflictError,
    VariantAlreadyExists,
    VariantNotFound,
)
from modules.products.models import Product, Variant
from modules.products.repositories.django_repository import (
    SCHEMA_CACHE_KEY,
    ProductDjangoRepository,
    VariantDjangoRepository,
    schema_cache_key,
)
from modules.products.repositories.interfaces import (
    IProductRepository,
    IVariantRepository,
)

pytestmark = pytest.mark.unit

SCHEMA = [
    {"key": "color", "label": "Color", "type": "STRING", "is_variant_option": False, "is_required": True, "default_value": "black"},
    {"key": "size", "label": "Size", "type": "STRING", "is_variant_option": True, "is_required": True, "default_value": None},
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def product_repo():
    return ProductDjangoRepository()


@pytest.fixture()
def variant_repo():
    return VariantDjangoRepository()


def _make_product(**overrides) -> Product:
    data = {"name": "T-Shirt", "attribute_schema": SCHEMA}
    data.update(overrides)
    product = Product(**data)
    product.save()
    return product


def _make_variant(product: Product, **overrides) -> Variant:
    data = {
        "product": product,
        "sku": "TS-RED-M",
        "price": Decimal("49.90"),
        "stock": 5,
        "attributes": {"color": "red", "size": "M"},
    }
    data.update(overrides)
    variant = Variant(**data)
    variant.save()
    return variant


# ===========================================================================
# ProductDjangoRepository
# ===========================================================================


class TestProductRepository:
    def test_is_instance_of_interface(self, product_repo):
        assert isinstance(product_repo, IProductRepository)

    def test_get_by_id(self, product_repo):
        product = _make_product()
        assert product_repo.get_by_id(str(product.id)) == product

    def test_get_by_id_missing(self, product_repo):
        assert product_repo.get_by_id("00000000-0000-0000-0000-000000000000") is None

    def test_get_by_id_invalid_uuid(self, product_repo):
        assert product_repo.get_by_id("not-a-uuid") is None

    def test_exists(self, product_repo):
        product = _make_product()
        assert product_repo.exists(str(product.id)) is True
        assert product_repo.exists("not-a-uuid") is False

    def test_list_with_filters(self, product_repo):
        _make_product(name="Red Shirt", brand_id="acme")
        _make_product(name="Blue Shirt", brand_id="northwind")
        result = product_repo.list({"name__icontains": "red"})
        assert [p.name for p in result] == ["Red Shirt"]
        assert len(product_repo.list()) == 2

    def test_save_persists(self, product_repo):
        product = product_repo.save(Product(name="Notebook"))
        assert Product.objects.filter(id=product.id).exists()


class TestProductSchemaCache:
    def test_get_schema(self, product_repo):
        product = _make_product()
        schema = product_repo.get_schema(str(product.id))
        assert [d.key for d in schema] == ["color", "size"]

    def test_get_schema_missing(self, product_repo):
        assert product_repo.get_schema("00000000-0000-0000-0000-000000000000") is None

    def test_schema_is_cached(self, product_repo, django_assert_num_queries):
        product = _make_product()
        product_repo.get_schema(str(product.id))
        with django_assert_num_queries(0):
            schema = product_repo.get_schema(str(product.id))
        assert "size" in schema

    def test_delete_evicts_cached_schema(self, product_repo):
        product = _make_product()
        product_repo.get_schema(str(product.id))
        assert cache.get(SCHEMA_CACHE_KEY.format(id=str(product.id))) is not None

        assert product_repo.delete(str(product.id)) is True
        assert cache.get(SCHEMA_CACHE_KEY.format(id=str(product.id))) is None
        assert product_repo.get_schema(str(product.id)) is None

    def test_delete_missing(self, product_repo):
        assert product_repo.delete("00000000-0000-0000-0000-000000000000") is False

    def test_cache_key_is_canonical(self):
        product = _make_product()
        expected = SCHEMA_CACHE_KEY.format(id=str(product.id))
        assert schema_cache_key(product.id) == expected
        assert schema_cache_key(product.id.hex) == expected
        assert schema_cache_key(str(product.id).upper()) == expected
        assert schema_cache_key("not-a-uuid") is None

    def test_get_schema_invalid_uuid(self, product_repo):
        assert product_repo.get_schema("not-a-uuid") is None

    def test_delete_evicts_schema_cached_under_other_spelling(self, product_repo):
        product = _make_product()
        assert product_repo.get_schema(product.id.hex) is not None
        assert product_repo.get_schema(str(product.id).upper()) is not None

        assert product_repo.delete(str(product.id)) is True
        assert product_repo.get_schema(product.id.hex) is None
        assert product_repo.get_schema(str(product.id).upper()) is None

    def test_delete_evicts_again_on_commit(self, product_repo, django_capture_on_commit_callbacks):
        product = _make_product()
        key = SCHEMA_CACHE_KEY.format(id=str(product.id))

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            product_repo.delete(str(product.id))
            # a concurrent reader re-caches the schema before the commit
            cache.set(key, SCHEMA)

        assert len(callbacks) == 1
        assert cache.get(key) is None

    def test_delete_logs_row_event(self, product_repo, caplog):
        product = _make_product()
        with caplog.at_level(logging.DEBUG, logger="modules"):
            product_repo.delete(str(product.id))
        messages = [record.getMessage() for record in caplog.records]
        assert any("product.row_deleted" in m for m in messages)
        assert not any("product.deleted" in m for m in messages)


# ===========================================================================
# VariantDjangoRepository
# ===========================================================================


class TestVariantRepositoryReads:
    def test_is_instance_of_interface(self, variant_repo):
        assert isinstance(variant_repo, IVariantRepository)

    def test_get_by_id(self, variant_repo):
        variant = _make_variant(_make_product())
        assert variant_repo.get_by_id(str(variant.id)).sku == "TS-RED-M"

    def test_get_by_id_invalid_uuid(self, variant_repo):
        assert variant_repo.get_by_id("nope") is None

    def test_get_by_sku_is_case_insensitive(self, variant_repo):
        _make_variant(_make_product())
        assert variant_repo.get_by_sku(" ts-red-m ") is not None
        assert variant_repo.get_by_sku("TS-RED-L") is None

    def test_list_by_product(self, variant_repo):
        shirt = _make_product()
        other = _make_product(name="Other")
        _make_variant(shirt, sku="A")
        _make_variant(shirt, sku="B")
        _make_variant(other, sku="C")
        assert [v.sku for v in variant_repo.list_by_product(str(shirt.id))] == ["A", "B"]

    def test_list_by_product_invalid_uuid(self, variant_repo):
        assert variant_repo.list_by_product("nope") == []


class TestVariantInsert:
    def test_insert_sets_initial_version(self, variant_repo):
        product = _make_product()
        variant = variant_repo.save(
            Variant(product=product, sku="ts-m", price=Decimal("1"), attributes={"size": "M"}, version=9)
        )
        variant.refresh_from_db()
        assert variant.version == 1
        assert variant.sku == "TS-M"

    def test_duplicate_sku(self, variant_repo):
        product = _make_product()
        _make_variant(product)
        with pytest.raises(VariantAlreadyExists):
            variant_repo.save(Variant(product=product, sku="ts-red-m", price=Decimal("1")))
        assert Variant.objects.count() == 1


class TestVariantVersionedUpdate:
    def test_update_increments_version(self, variant_repo):
        variant = _make_variant(_make_product())
        variant.price = Decimal("39.90")
        variant.attributes = {"size": "L"}

        saved = variant_repo.save(variant, expected_version=1)

        assert saved.version == 2
        stored = Variant.objects.get(id=variant.id)
        assert stored.version == 2
        assert stored.price == Decimal("39.90")
        assert stored.attributes == {"size": "L"}

    def test_defaults_expected_version_to_loaded_version(self, variant_repo):
        variant = _make_variant(_make_product())
        variant.stock = 0
        assert variant_repo.save(variant).version == 2

    def test_stale_version_raises_conflict(self, variant_repo):
        variant = _make_variant(_make_product())
        first = variant_repo.get_by_id(str(variant.id))
        second = variant_repo.get_by_id(str(variant.id))

        first.stock = 10
        variant_repo.save(first, expected_version=1)

        second.stock = 20
        with pytest.raises(ConcurrencyConflictError) as exc_info:
            variant_repo.save(second, expected_version=1)

        assert exc_info.value.expected_version == 1
        assert exc_info.value.current_version == 2
        assert Variant.objects.get(id=variant.id).stock == 10

    def test_vanished_variant(self, variant_repo):
        variant = _make_variant(_make_product())
        Variant.objects.filter(id=variant.id).delete()
        with pytest.raises(VariantNotFound):
            variant_repo.save(variant, expected_version=1)

    def test_sku_is_not_rewritten_by_update(self, variant_repo):
        variant = _make_variant(_make_product())
        variant.sku = "CHANGED"
        variant_repo.save(variant, expected_version=1)
        assert Variant.objects.get(id=variant.id).sku == "TS-RED-M"


class TestVariantDelete:
    def test_delete(self, variant_repo):
        variant = _make_variant(_make_product())
        assert variant_repo.delete(str(variant.id)) is True
        assert variant_repo.delete(str(variant.id)) is False

    def test_delete_by_product(self, variant_repo):
        shirt = _make_product()
        _make_variant(shirt, sku="A")
        _make_variant(shirt, sku="B")
        other = _make_variant(_make_product(name="Other"), sku="C")

        assert variant_repo.delete_by_product(str(shirt.id)) == 2
        assert list(Variant.objects.values_list("id", flat=True)) == [other.id]
