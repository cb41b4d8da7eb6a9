"""Event handlers for Returns domain events."""

from __future__ import annotations

import structlog

from modules.returns.events import (
    DriverSlipCreated,
    MerchantSlipCreated,
    MerchantSlipDelivered,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class DriverSlipCreatedHandler(IEventHandler[DriverSlipCreated]):
    def handle(self, event: DriverSlipCreated) -> None:
        logger.info(
            "returns.event.driver_slip_created",
            slip_id=str(event.aggregate_id),
            reference=event.reference,
            driver_name=event.driver_name,
            item_count=len(event.order_ids),
        )


class MerchantSlipCreatedHandler(IEventHandler[MerchantSlipCreated]):
    def handle(self, event: MerchantSlipCreated) -> None:
        logger.info(
            "returns.event.merchant_slip_created",
            slip_id=str(event.aggregate_id),
            reference=event.reference,
            merchant_name=event.merchant_name,
            item_count=len(event.order_ids),
        )


class MerchantSlipDeliveredHandler(IEventHandler[MerchantSlipDelivered]):
    def handle(self, event: MerchantSlipDelivered) -> None:
        logger.info(
            "returns.event.merchant_slip_delivered",
            slip_id=str(event.aggregate_id),
            reference=event.reference,
        )


driver_slip_created_handler = DriverSlipCreatedHandler()
merchant_slip_created_handler = MerchantSlipCreatedHandler()
merchant_slip_delivered_handler = MerchantSlipDeliveredHandler()
