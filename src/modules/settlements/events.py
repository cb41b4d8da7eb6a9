"""Domain events for the Settlements bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class DriverPaymentSlipCreated(DomainEvent):
    reference: str = ""
    driver_name: str = ""
    order_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MerchantPaymentSlipCreated(DomainEvent):
    reference: str = ""
    merchant_name: str = ""
    order_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MerchantPaymentSlipPaid(DomainEvent):
    reference: str = ""
    merchant_name: str = ""
    settled_count: int = 0
