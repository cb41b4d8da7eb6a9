"""Settlements URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.settlements.views import (
    DriverPaymentSlipViewSet,
    MerchantPaymentSlipViewSet,
)

router = DefaultRouter(trailing_slash=True)
router.register(
    "settlements/driver-payments", DriverPaymentSlipViewSet, basename="driver-payment"
)
router.register(
    "settlements/merchant-payments",
    MerchantPaymentSlipViewSet,
    basename="merchant-payment",
)

urlpatterns = router.urls
