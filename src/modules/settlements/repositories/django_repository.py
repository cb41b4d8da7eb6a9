"""Django ORM implementations of the payment slip repositories."""

from __future__ import annotations

from typing import List

from modules.core.repositories.slips import SlipDjangoRepository
from modules.orders.constants import OrderStatus
from modules.settlements.models import (
    DriverPaymentEntry,
    DriverPaymentSlip,
    MerchantPaymentEntry,
    MerchantPaymentSlip,
)
from modules.settlements.repositories.interfaces import (
    IDriverPaymentSlipRepository,
    IMerchantPaymentSlipRepository,
)


class DriverPaymentSlipDjangoRepository(
    SlipDjangoRepository, IDriverPaymentSlipRepository
):
    slip_model = DriverPaymentSlip
    entry_model = DriverPaymentEntry
    holding_status = OrderStatus.MONEY_RECEIVED


class MerchantPaymentSlipDjangoRepository(
    SlipDjangoRepository, IMerchantPaymentSlipRepository
):
    slip_model = MerchantPaymentSlip
    entry_model = MerchantPaymentEntry
    holding_status = OrderStatus.MONEY_RECEIVED

    def open_entries_of(self, slip: MerchantPaymentSlip) -> List[MerchantPaymentEntry]:
        return list(
            self.entry_model.objects.select_related("order")
            .filter(slip=slip, released_at__isnull=True)
            .order_by("position")
        )
