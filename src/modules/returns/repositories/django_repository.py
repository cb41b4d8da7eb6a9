"""Django ORM implementations of the return slip repositories."""

from __future__ import annotations

from modules.core.repositories.slips import SlipDjangoRepository
from modules.orders.constants import OrderStatus
from modules.returns.models import (
    DriverSlip,
    DriverSlipEntry,
    MerchantSlip,
    MerchantSlipEntry,
)
from modules.returns.repositories.interfaces import (
    IDriverSlipRepository,
    IMerchantSlipRepository,
)


class DriverSlipDjangoRepository(SlipDjangoRepository, IDriverSlipRepository):
    slip_model = DriverSlip
    entry_model = DriverSlipEntry
    holding_status = OrderStatus.BRANCH_RETURNED


class MerchantSlipDjangoRepository(SlipDjangoRepository, IMerchantSlipRepository):
    slip_model = MerchantSlip
    entry_model = MerchantSlipEntry
    holding_status = OrderStatus.MERCHANT_RETURNED
