"""Settlements service layer (Use Cases).

Two payment slips close the money loop of a delivered order:

- A driver payment slip records the cash a driver hands in.  Its orders
  must be ``DELIVERED`` and assigned to the driver; they move to
  ``MONEY_RECEIVED`` with the driver kept.
- A merchant payment slip lists orders whose cash is in
  (``MONEY_RECEIVED``) for one merchant.  Creating it moves nothing;
  marking it paid moves its orders to ``MERCHANT_SETTLED``.

Creation follows the same batch protocol as the return slips: lock,
validate the whole batch, snapshot the money columns, then transition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.batches import lock_batch, validate_batch
from modules.core.exceptions import SlipNotFound
from modules.orders.constants import MONEY_FIELDS, OrderStatus
from modules.orders.services import OrderService
from modules.settlements.constants import PaymentStatus
from modules.settlements.events import (
    DriverPaymentSlipCreated,
    MerchantPaymentSlipCreated,
    MerchantPaymentSlipPaid,
)
from modules.settlements.exceptions import OrderNotSettleable

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.settlements.dtos import (
        CreateDriverPaymentSlipDTO,
        CreateMerchantPaymentSlipDTO,
    )
    from modules.settlements.models import DriverPaymentSlip, MerchantPaymentSlip
    from modules.settlements.repositories.interfaces import (
        IDriverPaymentSlipRepository,
        IMerchantPaymentSlipRepository,
    )

logger = structlog.get_logger(__name__)


class SettlementService:
    """Application service for driver and merchant payment slips."""

    def __init__(
        self,
        order_repository: IOrderRepository,
        driver_payment_repository: IDriverPaymentSlipRepository,
        merchant_payment_repository: IMerchantPaymentSlipRepository,
        order_service: Optional[OrderService] = None,
    ) -> None:
        self._order_repo = order_repository
        self._driver_payment_repo = driver_payment_repository
        self._merchant_payment_repo = merchant_payment_repository
        self._order_service = order_service or OrderService(order_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_driver_payment_slip(
        self, dto: CreateDriverPaymentSlipDTO
    ) -> DriverPaymentSlip:
        """Record the cash a driver hands in for delivered orders.

        Raises:
            OrderNotFound: an id is unknown.
            OrderAlreadyClaimed: an order is on an open driver payment slip.
            OrderNotOwnedByParty: an order belongs to another driver.
            OrderNotSettleable: an order is not ``DELIVERED``.
        """
        log = logger.bind(driver_name=dto.driver_name, order_count=len(dto.order_ids))
        log.info("settlements.driver_payment_started")

        orders = lock_batch(self._order_repo, dto.order_ids)
        claimed = self._driver_payment_repo.open_claims(str(o.id) for o in orders)
        validate_batch(
            orders,
            claimed=claimed,
            owner=lambda order: order.driver,
            party_name=dto.driver_name,
            party_label="driver",
            slip_label="driver payment slip",
            accepts=lambda order: order.status == OrderStatus.DELIVERED,
            not_eligible=OrderNotSettleable,
        )

        entries = [
            _snapshot(order, position)
            for position, order in enumerate(orders, start=1)
        ]
        slip = self._driver_payment_repo.create(
            {"driver_name": dto.driver_name}, entries
        )

        for order in orders:
            self._order_service.apply_system_transition(
                order,
                OrderStatus.MONEY_RECEIVED,
                notes=f"Driver payment {slip.reference}",
            )

        slip.add_domain_event(
            DriverPaymentSlipCreated(
                aggregate_id=slip.id,
                reference=slip.reference,
                driver_name=slip.driver_name,
                order_ids=tuple(str(o.id) for o in orders),
            )
        )
        self._driver_payment_repo.save(slip)

        log.info(
            "settlements.driver_payment_created",
            slip_id=str(slip.id),
            reference=slip.reference,
            amount_due=str(slip.amount_due),
        )
        return slip

    @transaction.atomic
    def create_merchant_payment_slip(
        self, dto: CreateMerchantPaymentSlipDTO
    ) -> MerchantPaymentSlip:
        """List the orders a merchant is about to be paid for.

        Orders stay ``MONEY_RECEIVED`` until the slip is paid.

        Raises:
            OrderNotFound: an id is unknown.
            OrderAlreadyClaimed: an order is on an unpaid merchant payment slip.
            OrderNotOwnedByParty: an order belongs to another merchant.
            OrderNotSettleable: an order's cash has not been received.
        """
        log = logger.bind(
            merchant_name=dto.merchant_name, order_count=len(dto.order_ids)
        )
        log.info("settlements.merchant_payment_started")

        orders = lock_batch(self._order_repo, dto.order_ids)
        order_ids = [str(o.id) for o in orders]
        claimed = self._merchant_payment_repo.open_claims(order_ids)
        validate_batch(
            orders,
            claimed=claimed,
            owner=lambda order: order.merchant,
            party_name=dto.merchant_name,
            party_label="merchant",
            slip_label="merchant payment slip",
            accepts=lambda order: order.status == OrderStatus.MONEY_RECEIVED,
            not_eligible=OrderNotSettleable,
        )

        entries = [
            _snapshot(order, position)
            for position, order in enumerate(orders, start=1)
        ]
        slip = self._merchant_payment_repo.create(
            {
                "merchant_name": dto.merchant_name,
                "status": PaymentStatus.READY_FOR_PAYMENT,
            },
            entries,
        )
        slip.add_domain_event(
            MerchantPaymentSlipCreated(
                aggregate_id=slip.id,
                reference=slip.reference,
                merchant_name=slip.merchant_name,
                order_ids=tuple(order_ids),
            )
        )
        self._merchant_payment_repo.save(slip)

        log.info(
            "settlements.merchant_payment_created",
            slip_id=str(slip.id),
            reference=slip.reference,
            amount_due=str(slip.amount_due),
        )
        return slip

    @transaction.atomic
    def mark_merchant_payment_paid(self, slip_id: UUID | str) -> MerchantPaymentSlip:
        """Pay the merchant and settle the slip's orders.

        Orders still held by the slip move to ``MERCHANT_SETTLED``.
        Entries already released (the order was moved elsewhere after the
        slip was written) are skipped.  Paying a paid slip is a no-op.

        Raises:
            SlipNotFound: slip does not exist.
        """
        slip = self._merchant_payment_repo.get_for_update(str(slip_id))
        if not slip:
            raise SlipNotFound(f"Merchant payment slip {slip_id} not found.")

        log = logger.bind(slip_id=str(slip.id), reference=slip.reference)
        if slip.is_paid:
            log.info("settlements.merchant_payment_already_paid")
            return slip

        open_entries = self._merchant_payment_repo.open_entries_of(slip)
        skipped = slip.item_count - len(open_entries)
        if skipped:
            log.warning("settlements.released_entries_skipped", skipped=skipped)

        orders = lock_batch(self._order_repo, [e.order_id for e in open_entries])
        for order in orders:
            self._order_service.apply_system_transition(
                order,
                OrderStatus.MERCHANT_SETTLED,
                notes=f"Merchant payment {slip.reference}",
            )

        slip.status = PaymentStatus.PAID
        slip.paid_at = timezone.now()
        slip.add_domain_event(
            MerchantPaymentSlipPaid(
                aggregate_id=slip.id,
                reference=slip.reference,
                merchant_name=slip.merchant_name,
                settled_count=len(orders),
            )
        )
        self._merchant_payment_repo.save(slip)

        log.info("settlements.merchant_payment_paid", settled_count=len(orders))
        return slip

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_driver_payment_slip(self, slip_id: UUID | str) -> DriverPaymentSlip:
        slip = self._driver_payment_repo.get_by_id(str(slip_id))
        if not slip:
            raise SlipNotFound(f"Driver payment slip {slip_id} not found.")
        return slip

    def get_merchant_payment_slip(self, slip_id: UUID | str) -> MerchantPaymentSlip:
        slip = self._merchant_payment_repo.get_by_id(str(slip_id))
        if not slip:
            raise SlipNotFound(f"Merchant payment slip {slip_id} not found.")
        return slip

    def list_driver_payment_slips(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> List[DriverPaymentSlip]:
        return self._driver_payment_repo.list(filters)

    def list_merchant_payment_slips(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> List[MerchantPaymentSlip]:
        return self._merchant_payment_repo.list(filters)

    def list_driver_payment_candidates(self, driver_name: str) -> List[Order]:
        """Delivered orders of *driver_name* whose cash is not yet handed in."""
        orders = self._order_repo.list_by_driver(driver_name, [OrderStatus.DELIVERED])
        claimed = self._driver_payment_repo.open_claims(str(o.id) for o in orders)
        return [o for o in orders if str(o.id) not in claimed]

    def list_merchant_payment_candidates(self, merchant_name: str) -> List[Order]:
        """Orders of *merchant_name* with cash in and on no unpaid slip."""
        orders = self._order_repo.list_by_merchant(
            merchant_name, [OrderStatus.MONEY_RECEIVED]
        )
        claimed = self._merchant_payment_repo.open_claims(str(o.id) for o in orders)
        return [o for o in orders if str(o.id) not in claimed]


def _snapshot(order: Order, position: int) -> Dict[str, Any]:
    entry = {
        "position": position,
        "order": order,
        "order_number": order.order_number,
        "recipient": order.recipient,
        "order_status": order.status,
    }
    entry.update({name: getattr(order, name) for name in MONEY_FIELDS})
    return entry
