"""Returns service layer (Use Cases).

The Returns Aggregator batches returned parcels into slips and moves the
orders on as a side effect.  Both pipelines follow the same protocol
inside a single transaction:

1. Lock every order in the batch (ascending id order).
2. Validate the whole batch: no open claim, owned by the named party,
   in a status this slip accepts.  Nothing is written before the last
   order passes.
3. Snapshot the printable fields and insert the slip.
4. Transition every order through the Order Store.  Moving an order out
   of the status a slip holds it in releases that slip's entry in the
   same transaction, so claims never outlive the status they guard.

Any failure rolls the transaction back, so a rejected batch leaves no
slip, no entry and no status change behind.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.batches import lock_batch, validate_batch
from modules.core.exceptions import SlipNotFound
from modules.orders.constants import OrderStatus
from modules.orders.services import OrderService
from modules.orders.statuses import driver_return_codes, is_driver_return
from modules.returns.constants import SlipStatus
from modules.returns.events import (
    DriverSlipCreated,
    MerchantSlipCreated,
    MerchantSlipDelivered,
)
from modules.returns.exceptions import OrderNotReturnable

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.returns.dtos import CreateDriverSlipDTO, CreateMerchantSlipDTO
    from modules.returns.models import DriverSlip, MerchantSlip
    from modules.returns.repositories.interfaces import (
        IDriverSlipRepository,
        IMerchantSlipRepository,
    )

logger = structlog.get_logger(__name__)


class ReturnsService:
    """Application service for return slips.

    Receives repositories via constructor injection (DIP).  Order status
    changes are delegated to ``OrderService`` so history and realtime
    notifications stay in one place.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        driver_slip_repository: IDriverSlipRepository,
        merchant_slip_repository: IMerchantSlipRepository,
        order_service: Optional[OrderService] = None,
    ) -> None:
        self._order_repo = order_repository
        self._driver_slip_repo = driver_slip_repository
        self._merchant_slip_repo = merchant_slip_repository
        self._order_service = order_service or OrderService(order_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_driver_slip(self, dto: CreateDriverSlipDTO) -> DriverSlip:
        """Record parcels a driver handed back to the branch.

        Orders must be assigned to ``dto.driver_name`` and sit in a
        driver-return status.  They move to ``BRANCH_RETURNED`` with the
        driver cleared.

        Raises:
            OrderNotFound: an id is unknown.
            OrderAlreadyClaimed: an order is on an open driver slip.
            OrderNotOwnedByParty: an order belongs to another driver.
            OrderNotReturnable: an order is not in a driver-return status.
        """
        log = logger.bind(driver_name=dto.driver_name, order_count=len(dto.order_ids))
        log.info("returns.driver_slip_started")

        orders = lock_batch(self._order_repo, dto.order_ids)
        claimed = self._driver_slip_repo.open_claims(str(o.id) for o in orders)
        validate_batch(
            orders,
            claimed=claimed,
            owner=lambda order: order.driver,
            party_name=dto.driver_name,
            party_label="driver",
            slip_label="driver slip",
            accepts=lambda order: is_driver_return(order.status),
            not_eligible=OrderNotReturnable,
        )

        entries = [
            _snapshot(order, position, reason=order.status)
            for position, order in enumerate(orders, start=1)
        ]
        slip = self._driver_slip_repo.create({"driver_name": dto.driver_name}, entries)

        for order in orders:
            self._order_service.apply_system_transition(
                order,
                OrderStatus.BRANCH_RETURNED,
                clear_driver=True,
                notes=f"Driver slip {slip.reference}",
            )

        slip.add_domain_event(
            DriverSlipCreated(
                aggregate_id=slip.id,
                reference=slip.reference,
                driver_name=slip.driver_name,
                order_ids=tuple(str(o.id) for o in orders),
            )
        )
        self._driver_slip_repo.save(slip)

        log.info("returns.driver_slip_created", slip_id=str(slip.id), reference=slip.reference)
        return slip

    @transaction.atomic
    def create_merchant_slip(self, dto: CreateMerchantSlipDTO) -> MerchantSlip:
        """Record parcels the branch is handing back to a merchant.

        Orders must belong to ``dto.merchant_name`` and sit in
        ``BRANCH_RETURNED``.  They move to ``MERCHANT_RETURNED``, which
        releases their driver-slip entries.  The slip starts
        ``ready_for_pickup``.

        Raises:
            OrderNotFound: an id is unknown.
            OrderAlreadyClaimed: an order is already on a merchant slip.
            OrderNotOwnedByParty: an order belongs to another merchant.
            OrderNotReturnable: an order has not been received at the branch.
        """
        log = logger.bind(
            merchant_name=dto.merchant_name, order_count=len(dto.order_ids)
        )
        log.info("returns.merchant_slip_started")

        orders = lock_batch(self._order_repo, dto.order_ids)
        order_ids = [str(o.id) for o in orders]
        claimed = self._merchant_slip_repo.open_claims(order_ids)
        validate_batch(
            orders,
            claimed=claimed,
            owner=lambda order: order.merchant,
            party_name=dto.merchant_name,
            party_label="merchant",
            slip_label="merchant slip",
            accepts=lambda order: order.status == OrderStatus.BRANCH_RETURNED,
            not_eligible=OrderNotReturnable,
        )

        entries = [
            _snapshot(order, position, reason=order.previous_status or order.status)
            for position, order in enumerate(orders, start=1)
        ]
        slip = self._merchant_slip_repo.create(
            {
                "merchant_name": dto.merchant_name,
                "status": SlipStatus.READY_FOR_PICKUP,
            },
            entries,
        )

        for order in orders:
            self._order_service.apply_system_transition(
                order,
                OrderStatus.MERCHANT_RETURNED,
                notes=f"Merchant slip {slip.reference}",
            )

        slip.add_domain_event(
            MerchantSlipCreated(
                aggregate_id=slip.id,
                reference=slip.reference,
                merchant_name=slip.merchant_name,
                order_ids=tuple(order_ids),
            )
        )
        self._merchant_slip_repo.save(slip)

        log.info(
            "returns.merchant_slip_created", slip_id=str(slip.id), reference=slip.reference
        )
        return slip

    @transaction.atomic
    def mark_merchant_slip_delivered(self, slip_id: UUID | str) -> MerchantSlip:
        """Confirm the merchant collected the parcels.

        Only the slip changes; orders stay ``MERCHANT_RETURNED``.  A slip
        already delivered is returned unchanged.

        Raises:
            SlipNotFound: slip does not exist.
        """
        slip = self._merchant_slip_repo.get_for_update(str(slip_id))
        if not slip:
            raise SlipNotFound(f"Merchant slip {slip_id} not found.")

        log = logger.bind(slip_id=str(slip.id), reference=slip.reference)
        if slip.status == SlipStatus.DELIVERED_TO_MERCHANT:
            log.info("returns.merchant_slip_already_delivered")
            return slip

        slip.status = SlipStatus.DELIVERED_TO_MERCHANT
        slip.delivered_at = timezone.now()
        slip.add_domain_event(
            MerchantSlipDelivered(
                aggregate_id=slip.id,
                reference=slip.reference,
                merchant_name=slip.merchant_name,
            )
        )
        self._merchant_slip_repo.save(slip)

        log.info("returns.merchant_slip_delivered")
        return slip

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_driver_slip(self, slip_id: UUID | str) -> DriverSlip:
        slip = self._driver_slip_repo.get_by_id(str(slip_id))
        if not slip:
            raise SlipNotFound(f"Driver slip {slip_id} not found.")
        return slip

    def get_merchant_slip(self, slip_id: UUID | str) -> MerchantSlip:
        slip = self._merchant_slip_repo.get_by_id(str(slip_id))
        if not slip:
            raise SlipNotFound(f"Merchant slip {slip_id} not found.")
        return slip

    def list_driver_slips(self, filters: Optional[Dict[str, Any]] = None) -> List[DriverSlip]:
        return self._driver_slip_repo.list(filters)

    def list_merchant_slips(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> List[MerchantSlip]:
        return self._merchant_slip_repo.list(filters)

    def list_driver_return_candidates(self, driver_name: str) -> List[Order]:
        """Returned parcels still held by *driver_name* and on no open slip."""
        orders = self._order_repo.list_by_driver(driver_name, driver_return_codes())
        claimed = self._driver_slip_repo.open_claims(str(o.id) for o in orders)
        return [o for o in orders if str(o.id) not in claimed]

    def list_branch_return_candidates(self, merchant_name: str) -> List[Order]:
        """Parcels at the branch for *merchant_name* not yet on a merchant slip."""
        orders = self._order_repo.list_by_merchant(
            merchant_name, [OrderStatus.BRANCH_RETURNED]
        )
        claimed = self._merchant_slip_repo.open_claims(str(o.id) for o in orders)
        return [o for o in orders if str(o.id) not in claimed]


def _snapshot(order: Order, position: int, *, reason: str) -> Dict[str, Any]:
    return {
        "position": position,
        "order": order,
        "order_number": order.order_number,
        "recipient": order.recipient,
        "phone": order.phone,
        "city": order.city,
        "address": order.address,
        "previous_status": reason,
        "item_price": order.item_price,
    }
