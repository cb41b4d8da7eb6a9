"""Slip repositories package."""

from modules.returns.repositories.django_repository import (
    DriverSlipDjangoRepository,
    MerchantSlipDjangoRepository,
)
from modules.returns.repositories.interfaces import (
    IDriverSlipRepository,
    IMerchantSlipRepository,
)

__all__ = [
    "DriverSlipDjangoRepository",
    "IDriverSlipRepository",
    "IMerchantSlipRepository",
    "MerchantSlipDjangoRepository",
]
