"""Order URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.orders.views import DriverPresenceView, OrderViewSet, StatusViewSet

router = DefaultRouter(trailing_slash=True)
router.register("orders", OrderViewSet, basename="order")
router.register("statuses", StatusViewSet, basename="status")

urlpatterns = [
    path(
        "drivers/<str:driver_id>/presence/",
        DriverPresenceView.as_view(),
        name="driver-presence",
    ),
    *router.urls,
]
