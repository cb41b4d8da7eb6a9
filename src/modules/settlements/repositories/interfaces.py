"""Payment slip repository interfaces."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List

from modules.core.repositories.interfaces import ISlipRepository

if TYPE_CHECKING:
    from modules.settlements.models import (
        DriverPaymentSlip,
        MerchantPaymentEntry,
        MerchantPaymentSlip,
    )


class IDriverPaymentSlipRepository(ISlipRepository["DriverPaymentSlip"]):
    """Cash handed in by drivers; entries hold orders in ``MONEY_RECEIVED``."""


class IMerchantPaymentSlipRepository(ISlipRepository["MerchantPaymentSlip"]):
    """Cash paid out to merchants; entries hold orders in ``MONEY_RECEIVED``."""

    @abstractmethod
    def open_entries_of(self, slip: MerchantPaymentSlip) -> List[MerchantPaymentEntry]:
        """Entries of *slip* still holding their order, in slip order."""
