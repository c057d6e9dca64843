import django_filters
from django.db import connection

from modules.products.models import Product, Variant


class ProductFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    brand = django_filters.CharFilter(field_name="brand_id", lookup_expr="exact")
    category = django_filters.CharFilter(method="filter_category")

    class Meta:
        model = Product
        fields = ["name", "brand", "category"]

    def filter_category(self, queryset, name, value):
        """Products whose ``category_ids`` list holds ``value`` (no ancestor expansion)."""
        if connection.features.supports_json_field_contains:
            return queryset.filter(category_ids__contains=[value])
        # SQLite has no JSON containment lookup.
        matching = [
            product_id
            for product_id, category_ids in queryset.values_list("id", "category_ids")
            if value in (category_ids or [])
        ]
        return queryset.filter(id__in=matching)


class VariantFilter(django_filters.FilterSet):
    sku = django_filters.CharFilter(field_name="sku", lookup_expr="iexact")
    available = django_filters.BooleanFilter(field_name="available")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    in_stock = django_filters.BooleanFilter(method="filter_in_stock")

    class Meta:
        model = Variant
        fields = ["sku", "available", "min_price", "max_price", "in_stock"]

    def filter_in_stock(self, queryset, name, value):
        if value:
            return queryset.filter(stock__gt=0)
        return queryset.filter(stock=0)
