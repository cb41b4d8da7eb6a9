"""Keeps return-slip claims in step with order status.

An order leaves its driver slip once it is no longer ``BRANCH_RETURNED``
and its merchant slip once it is no longer ``MERCHANT_RETURNED``.  The
release runs inside the transition's transaction, so a parcel sent out
again and returned a second time can go on new slips.
"""

from __future__ import annotations

from django.dispatch import receiver
from django.utils import timezone

from modules.core.repositories.slips import release_stale_claims
from modules.orders.signals import order_transitioned
from modules.returns.repositories.django_repository import (
    DriverSlipDjangoRepository,
    MerchantSlipDjangoRepository,
)

_REPOSITORIES = (DriverSlipDjangoRepository(), MerchantSlipDjangoRepository())


@receiver(order_transitioned, dispatch_uid="returns.release_stale_claims")
def release_return_claims(sender, order, old_status, new_status, **kwargs) -> None:
    release_stale_claims(_REPOSITORIES, str(order.id), new_status, timezone.now())
