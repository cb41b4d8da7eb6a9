"""Domain events for the Returns bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class DriverSlipCreated(DomainEvent):
    reference: str = ""
    driver_name: str = ""
    order_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MerchantSlipCreated(DomainEvent):
    reference: str = ""
    merchant_name: str = ""
    order_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MerchantSlipDelivered(DomainEvent):
    reference: str = ""
    merchant_name: str = ""
