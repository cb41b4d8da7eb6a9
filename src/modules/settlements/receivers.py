"""Closes payment-slip entries once their order leaves ``MONEY_RECEIVED``."""

from __future__ import annotations

from django.dispatch import receiver
from django.utils import timezone

from modules.core.repositories.slips import release_stale_claims
from modules.orders.signals import order_transitioned
from modules.settlements.repositories.django_repository import (
    DriverPaymentSlipDjangoRepository,
    MerchantPaymentSlipDjangoRepository,
)

_REPOSITORIES = (
    DriverPaymentSlipDjangoRepository(),
    MerchantPaymentSlipDjangoRepository(),
)


@receiver(order_transitioned, dispatch_uid="settlements.release_stale_claims")
def release_payment_claims(sender, order, old_status, new_status, **kwargs) -> None:
    release_stale_claims(_REPOSITORIES, str(order.id), new_status, timezone.now())
