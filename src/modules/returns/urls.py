"""Returns URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.returns.views import DriverSlipViewSet, MerchantSlipViewSet

router = DefaultRouter(trailing_slash=True)
router.register("returns/driver-slips", DriverSlipViewSet, basename="driver-slip")
router.register("returns/merchant-slips", MerchantSlipViewSet, basename="merchant-slip")

urlpatterns = router.urls
