"""Return slip repository interfaces.

One contract per slip aggregate.  The claim look-ups come from
``ISlipRepository``; the Service Layer depends exclusively on these
contracts (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modules.core.repositories.interfaces import ISlipRepository

if TYPE_CHECKING:
    from modules.returns.models import DriverSlip, MerchantSlip


class IDriverSlipRepository(ISlipRepository["DriverSlip"]):
    """Driver to branch slips; entries hold orders in ``BRANCH_RETURNED``."""


class IMerchantSlipRepository(ISlipRepository["MerchantSlip"]):
    """Branch to merchant slips; entries hold orders in ``MERCHANT_RETURNED``."""
