"""Payment slip repositories package."""

from modules.settlements.repositories.django_repository import (
    DriverPaymentSlipDjangoRepository,
    MerchantPaymentSlipDjangoRepository,
)
from modules.settlements.repositories.interfaces import (
    IDriverPaymentSlipRepository,
    IMerchantPaymentSlipRepository,
)

__all__ = [
    "DriverPaymentSlipDjangoRepository",
    "IDriverPaymentSlipRepository",
    "IMerchantPaymentSlipRepository",
    "MerchantPaymentSlipDjangoRepository",
]
