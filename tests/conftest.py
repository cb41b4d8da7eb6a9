from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Tuple

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.returns.repositories.django_repository import (
    DriverSlipDjangoRepository,
    MerchantSlipDjangoRepository,
)
from modules.returns.services import ReturnsService
from modules.settlements.repositories.django_repository import (
    DriverPaymentSlipDjangoRepository,
    MerchantPaymentSlipDjangoRepository,
)
from modules.settlements.services import SettlementService
from shared.infrastructure.realtime import REALTIME_EVENTS, realtime_bus


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for anonymous requests."""
    return APIClient()


@pytest.fixture()
def staff_user():
    return get_user_model().objects.create_user("dispatcher", password="pass12345")


@pytest.fixture()
def auth_client(api_client, staff_user):
    """APIClient authenticated as a dispatcher."""
    api_client.force_authenticate(user=staff_user)
    return api_client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def order_repository():
    return OrderDjangoRepository()


@pytest.fixture()
def order_service(order_repository):
    return OrderService(order_repository=order_repository)


@pytest.fixture()
def returns_service(order_repository, order_service):
    return ReturnsService(
        order_repository=order_repository,
        driver_slip_repository=DriverSlipDjangoRepository(),
        merchant_slip_repository=MerchantSlipDjangoRepository(),
        order_service=order_service,
    )


@pytest.fixture()
def settlement_service(order_repository, order_service):
    return SettlementService(
        order_repository=order_repository,
        driver_payment_repository=DriverPaymentSlipDjangoRepository(),
        merchant_payment_repository=MerchantPaymentSlipDjangoRepository(),
        order_service=order_service,
    )


@pytest.fixture()
def make_order():
    """Insert an order directly, bypassing intake, in any state."""
    counter = {"next": 1000}

    def _make(**overrides: Any) -> Order:
        counter["next"] += 1
        data: Dict[str, Any] = {
            "order_number": counter["next"],
            "recipient": "سارة",
            "phone": "0791234567",
            "address": "شارع الجامعة",
            "city": "عمان",
            "region": "الجبيهة",
            "merchant": "متجر الأمل",
            "status": OrderStatus.PENDING,
            "cod": Decimal("20.00"),
            "item_price": Decimal("17.50"),
            "delivery_fee": Decimal("1.50"),
            "driver_fee": Decimal("1.00"),
        }
        data.update(overrides)
        return Order.objects.create(**data)

    return _make


@pytest.fixture()
def realtime_messages():
    """Collects every realtime message published while the test runs."""
    received: List[Tuple[str, Dict[str, Any]]] = []
    unsubscribers = [
        realtime_bus.subscribe(name, lambda payload, name=name: received.append((name, payload)))
        for name in REALTIME_EVENTS
    ]
    yield received
    for unsubscribe in unsubscribers:
        unsubscribe()
