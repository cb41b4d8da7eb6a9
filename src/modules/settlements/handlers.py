"""Event handlers for Settlements domain events."""

from __future__ import annotations

import structlog

from modules.settlements.events import (
    DriverPaymentSlipCreated,
    MerchantPaymentSlipCreated,
    MerchantPaymentSlipPaid,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class DriverPaymentSlipCreatedHandler(IEventHandler[DriverPaymentSlipCreated]):
    def handle(self, event: DriverPaymentSlipCreated) -> None:
        logger.info(
            "settlements.event.driver_payment_created",
            slip_id=str(event.aggregate_id),
            reference=event.reference,
            driver_name=event.driver_name,
            item_count=len(event.order_ids),
        )


class MerchantPaymentSlipCreatedHandler(IEventHandler[MerchantPaymentSlipCreated]):
    def handle(self, event: MerchantPaymentSlipCreated) -> None:
        logger.info(
            "settlements.event.merchant_payment_created",
            slip_id=str(event.aggregate_id),
            reference=event.reference,
            merchant_name=event.merchant_name,
            item_count=len(event.order_ids),
        )


class MerchantPaymentSlipPaidHandler(IEventHandler[MerchantPaymentSlipPaid]):
    def handle(self, event: MerchantPaymentSlipPaid) -> None:
        logger.info(
            "settlements.event.merchant_payment_paid",
            slip_id=str(event.aggregate_id),
            reference=event.reference,
            settled_count=event.settled_count,
        )


driver_payment_created_handler = DriverPaymentSlipCreatedHandler()
merchant_payment_created_handler = MerchantPaymentSlipCreatedHandler()
merchant_payment_paid_handler = MerchantPaymentSlipPaidHandler()
