"""Product DRF serializers for API output.

The serializers operate at the Interface layer (API Views) and are
read-only: input goes through the Pydantic DTOs in ``dtos.py`` and the
Service Layer.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product, Variant


class AttributeDefinitionSerializer(serializers.Serializer):
    """One schema record."""

    key = serializers.CharField()
    label = serializers.CharField()
    type = serializers.CharField()
    is_variant_option = serializers.BooleanField()
    is_required = serializers.BooleanField()
    default_value = serializers.JSONField(allow_null=True)


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    attribute_definitions = AttributeDefinitionSerializer(
        source="attribute_schema", many=True, read_only=True
    )

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "brand_id",
            "category_ids",
            "attribute_definitions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class VariantSerializer(serializers.ModelSerializer):
    """Read serializer for the Variant resource.

    ``attributes`` is the stored map (selections and overrides only);
    ``effective_attributes`` adds the product defaults.  It is computed by
    the ``ProductService`` passed in the serializer context as ``service``,
    which reads the cached product schema.
    """

    product_id = serializers.UUIDField(read_only=True)
    effective_attributes = serializers.SerializerMethodField()

    class Meta:
        model = Variant
        fields = [
            "id",
            "product_id",
            "sku",
            "price",
            "stock",
            "available",
            "images",
            "attributes",
            "effective_attributes",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_effective_attributes(self, obj: Variant) -> dict:
        return self.context["service"].effective_attributes(obj)
