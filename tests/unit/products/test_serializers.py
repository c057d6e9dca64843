"""Unit tests for Product and Variant DRF serializers.

Covers:
- Field presence.
- Schema records exposed as ``attribute_definitions``.
- Stored vs. effective attributes on variants (through ProductService).
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.models import Product, Variant
from modules.products.repositories.django_repository import (
    ProductDjangoRepository,
    VariantDjangoRepository,
)
from modules.products.serializers import ProductSerializer, VariantSerializer
from modules.products.services import ProductService

pytestmark = pytest.mark.unit

SCHEMA = [
    {"key": "color", "label": "Color", "type": "STRING", "is_variant_option": False, "is_required": True, "default_value": "black"},
    {"key": "ports", "label": "Ports", "type": "LIST_STRING", "is_variant_option": False, "is_required": False, "default_value": ["USB-C"]},
    {"key": "size", "label": "Size", "type": "STRING", "is_variant_option": True, "is_required": True, "default_value": None},
]


@pytest.fixture()
def product():
    product = Product(name="T-Shirt", brand_id="acme", category_ids=["apparel"], attribute_schema=SCHEMA)
    product.save()
    return product


@pytest.fixture()
def context():
    service = ProductService(
        product_repository=ProductDjangoRepository(),
        variant_repository=VariantDjangoRepository(),
    )
    return {"service": service}


@pytest.fixture()
def variant(product):
    variant = Variant(
        product=product,
        sku="TS-M",
        price=Decimal("49.90"),
        stock=4,
        attributes={"size": "M"},
    )
    variant.save()
    return variant


class TestProductSerializer:
    def test_fields(self, product):
        data = ProductSerializer(product).data
        assert set(data) == {
            "id",
            "name",
            "description",
            "brand_id",
            "category_ids",
            "attribute_definitions",
            "created_at",
            "updated_at",
        }

    def test_attribute_definitions(self, product):
        data = ProductSerializer(product).data
        assert [d["key"] for d in data["attribute_definitions"]] == ["color", "ports", "size"]
        assert data["attribute_definitions"][1]["default_value"] == ["USB-C"]
        assert data["attribute_definitions"][2]["default_value"] is None

    def test_id_serialised_as_string(self, product):
        assert ProductSerializer(product).data["id"] == str(product.id)


class TestVariantSerializer:
    def test_stored_and_effective_attributes(self, variant, context):
        data = VariantSerializer(variant, context=context).data
        assert data["attributes"] == {"size": "M"}
        assert data["effective_attributes"] == {
            "color": "black",
            "ports": ["USB-C"],
            "size": "M",
        }

    def test_commercial_fields(self, variant, product, context):
        data = VariantSerializer(variant, context=context).data
        assert data["product_id"] == str(product.id)
        assert data["sku"] == "TS-M"
        assert data["price"] == "49.90"
        assert data["stock"] == 4
        assert data["available"] is True
        assert data["version"] == 1

    def test_effective_attributes_read_cached_schema(self, variant, context, django_assert_num_queries):
        VariantSerializer(variant, context=context).data
        with django_assert_num_queries(0):
            data = VariantSerializer(variant, context=context).data
        assert data["effective_attributes"]["color"] == "black"
