"""Settlements DTOs for the Service Layer."""

from __future__ import annotations

from modules.core.dtos import DriverSlipRequestDTO, MerchantSlipRequestDTO


class CreateDriverPaymentSlipDTO(DriverSlipRequestDTO):
    """Delivered orders whose cash a driver hands in."""


class CreateMerchantPaymentSlipDTO(MerchantSlipRequestDTO):
    """Orders whose cash is paid out to a merchant."""
