"""Product and Variant URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.products.views import ProductViewSet, VariantViewSet

router = DefaultRouter(trailing_slash=True)
router.register("products", ProductViewSet, basename="product")
router.register("variants", VariantViewSet, basename="variant")

urlpatterns = router.urls
