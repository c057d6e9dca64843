from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.products.dtos import CreateProductDTO, CreateVariantDTO
from modules.products.models import Product
from modules.products.repositories.django_repository import (
    ProductDjangoRepository,
    VariantDjangoRepository,
)
from modules.products.services import ProductService

T_SHIRT_SCHEMA = [
    {"key": "color", "label": "Color", "type": "STRING", "is_variant_option": True, "is_required": True},
    {"key": "size", "label": "Size", "type": "STRING", "is_variant_option": True, "is_required": True},
    {"key": "material", "label": "Material", "type": "STRING", "is_required": True, "default_value": "cotton"},
    {"key": "swatch", "label": "Swatch", "type": "COLOR_HEX"},
]

NOTEBOOK_SCHEMA = [
    {"key": "ram_gb", "label": "RAM (GB)", "type": "INTEGER", "is_variant_option": True, "is_required": True},
    {"key": "screen_inches", "label": "Screen", "type": "DOUBLE", "default_value": 14.0},
    {"key": "backlit_keyboard", "label": "Backlit keyboard", "type": "BOOLEAN", "default_value": False},
    {"key": "ports", "label": "Ports", "type": "LIST_STRING", "default_value": ["USB-C", "HDMI"]},
]

# (name, brand, categories, schema, variants as (sku, price, stock, attributes))
CATALOG = [
    (
        "Basic T-Shirt",
        "acme",
        ["apparel"],
        T_SHIRT_SCHEMA,
        [
            ("TSHIRT-RED-M", Decimal("49.90"), 30, {"color": "red", "size": "M"}),
            ("TSHIRT-RED-L", Decimal("49.90"), 12, {"color": "red", "size": "L"}),
            (
                "TSHIRT-BLU-M",
                Decimal("54.90"),
                8,
                {"color": "blue", "size": "M", "material": "linen", "swatch": "#1E3A8A"},
            ),
        ],
    ),
    (
        "Notebook 14",
        "northwind",
        ["electronics", "computers"],
        NOTEBOOK_SCHEMA,
        [
            ("NB14-8GB", Decimal("3999.00"), 5, {"ram_gb": 8}),
            ("NB14-16GB", Decimal("4799.00"), 3, {"ram_gb": 16, "backlit_keyboard": True}),
            (
                "NB14-32GB",
                Decimal("6299.00"),
                1,
                {"ram_gb": 32, "backlit_keyboard": True, "ports": ["USB-C", "USB-C", "HDMI"]},
            ),
        ],
    ),
]


class Command(BaseCommand):
    help = "Seed database with sample products, schemas and variants."

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")
        service = ProductService(
            product_repository=ProductDjangoRepository(),
            variant_repository=VariantDjangoRepository(),
        )

        users_created = self._seed_users()
        products, variants = self._seed_catalog(service)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={products}, "
                f"variants={variants}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="user").exists():
            User.objects.create_user("user", password="user123")
            created += 1
        return created

    def _seed_catalog(self, service: ProductService) -> tuple[int, int]:
        self.stdout.write("Creating products...")
        products = variants = 0
        for name, brand, categories, schema, variant_rows in CATALOG:
            if Product.objects.filter(name=name).exists():
                continue
            product = service.create_product(
                CreateProductDTO(
                    name=name,
                    brand_id=brand,
                    category_ids=categories,
                    attribute_definitions=schema,
                )
            )
            products += 1
            for sku, price, stock, attributes in variant_rows:
                service.create_variant(
                    str(product.id),
                    CreateVariantDTO(sku=sku, price=price, stock=stock, attributes=attributes),
                )
                variants += 1
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products, variants
