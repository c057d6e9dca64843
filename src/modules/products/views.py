"""Product and Variant API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.products.dtos import (
    CreateProductDTO,
    CreateVariantDTO,
    UpdateProductDTO,
    UpdateVariantDTO,
)
from modules.products.exceptions import (
    ConcurrencyConflictError,
    InvalidVariantAttributesError,
    ProductNotFound,
    SchemaDefinitionError,
    VariantAlreadyExists,
    VariantNotFound,
)
from modules.products.filters import ProductFilter, VariantFilter
from modules.products.models import Product, Variant
from modules.products.repositories.django_repository import (
    ProductDjangoRepository,
    VariantDjangoRepository,
)
from modules.products.serializers import (
    AttributeDefinitionSerializer,
    ProductSerializer,
    VariantSerializer,
)
from modules.products.services import ProductService


def _build_service() -> ProductService:
    return ProductService(
        product_repository=ProductDjangoRepository(),
        variant_repository=VariantDjangoRepository(),
    )


def _not_found(resource: str) -> Response:
    return Response(
        {"detail": f"{resource} not found."},
        status=status.HTTP_404_NOT_FOUND,
    )


def _bad_request(exc: Exception) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def _invalid_attributes(exc: InvalidVariantAttributesError) -> Response:
    return Response(
        {"detail": str(exc), "key": exc.key, "reason": str(exc.reason)},
        status=status.HTTP_400_BAD_REQUEST,
    )


def _conflict(exc: Exception) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)


def _version_conflict(exc: ConcurrencyConflictError) -> Response:
    return Response(
        {
            "detail": str(exc),
            "expected_version": exc.expected_version,
            "current_version": exc.current_version,
        },
        status=status.HTTP_409_CONFLICT,
    )


class ProductViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Product CRUD plus the product's schema and variants.

    Does **not** extend ``ModelViewSet``: writes go through the
    service/repository layer.
    """

    filterset_class = ProductFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "created_at"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Product.objects.all()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    def get_serializer_context(self) -> dict:
        return {**super().get_serializer_context(), "service": self._service}

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(str(pk))
        except ProductNotFound:
            return _not_found("Product")
        return Response(ProductSerializer(product).data)

    @action(detail=True, methods=["get"], url_path="schema", url_name="schema")
    def attribute_schema(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/schema/"""
        try:
            schema = self._service.get_schema(str(pk))
        except ProductNotFound:
            return _not_found("Product")
        return Response(AttributeDefinitionSerializer(schema.to_list(), many=True).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        try:
            dto = CreateProductDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return _bad_request(exc)

        try:
            product = self._service.create_product(dto)
        except SchemaDefinitionError as exc:
            return _bad_request(exc)
        except InvalidVariantAttributesError as exc:
            return _invalid_attributes(exc)
        except VariantAlreadyExists as exc:
            return _conflict(exc)

        out = ProductSerializer(product)
        return Response(out.data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/

        The attribute schema is not updatable; only base data changes.
        """
        try:
            dto = UpdateProductDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return _bad_request(exc)

        try:
            product = self._service.update_product(str(pk), dto)
        except ProductNotFound:
            return _not_found("Product")
        return Response(ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/ (variants are deleted too)."""
        try:
            self._service.delete_product(str(pk))
        except ProductNotFound:
            return _not_found("Product")
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Variants of a product
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get", "post"], url_path="variants")
    def variants(self, request: Request, pk: str | None = None) -> Response:
        """GET/POST /api/v1/products/{pk}/variants/"""
        if request.method == "POST":
            return self._create_variant(request, str(pk))

        try:
            variants = self._service.list_variants(str(pk))
        except ProductNotFound:
            return _not_found("Product")

        page = self.paginate_queryset(variants)
        if page is not None:
            out = VariantSerializer(page, many=True, context=self.get_serializer_context())
            return self.get_paginated_response(out.data)
        out = VariantSerializer(variants, many=True, context=self.get_serializer_context())
        return Response(out.data)

    def _create_variant(self, request: Request, product_id: str) -> Response:
        try:
            dto = CreateVariantDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return _bad_request(exc)

        try:
            variant = self._service.create_variant(product_id, dto)
        except ProductNotFound:
            return _not_found("Product")
        except InvalidVariantAttributesError as exc:
            return _invalid_attributes(exc)
        except VariantAlreadyExists as exc:
            return _conflict(exc)

        out = VariantSerializer(variant, context=self.get_serializer_context())
        return Response(out.data, status=status.HTTP_201_CREATED)


class VariantViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for reading, updating and deleting single variants.

    Variants are created through ``/products/{pk}/variants/``.
    Updates must carry ``expected_version``; a stale version is a 409.
    """

    filterset_class = VariantFilter
    ordering_fields = ["price", "stock", "created_at"]
    ordering = ["created_at", "id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    queryset = Variant.objects.select_related("product")
    serializer_class = VariantSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    def get_serializer_context(self) -> dict:
        return {**super().get_serializer_context(), "service": self._service}

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/variants/{pk}/"""
        try:
            variant = self._service.get_variant(str(pk))
        except VariantNotFound:
            return _not_found("Variant")
        out = VariantSerializer(variant, context=self.get_serializer_context())
        return Response(out.data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/variants/{pk}/"""
        try:
            dto = UpdateVariantDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return _bad_request(exc)

        try:
            variant = self._service.update_variant(str(pk), dto)
        except VariantNotFound:
            return _not_found("Variant")
        except InvalidVariantAttributesError as exc:
            return _invalid_attributes(exc)
        except ConcurrencyConflictError as exc:
            return _version_conflict(exc)

        out = VariantSerializer(variant, context=self.get_serializer_context())
        return Response(out.data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/variants/{pk}/"""
        try:
            self._service.delete_variant(str(pk))
        except VariantNotFound:
            return _not_found("Variant")
        return Response(status=status.HTTP_204_NO_CONTENT)
