"""Order service layer (Use Cases).

The Order Store: the only code path allowed to mutate order state.
Every write runs inside ``transaction.atomic`` and holds a row lock on
the orders it touches, so two transitions on the same order never
interleave.  Batch operations lock in ascending id order.

Rules enforced:
- Status changes pass the Transition Validator first.
- ``previous_status`` always records the status being left.
- Each accepted transition appends a history row and emits
  ``OrderStatusChanged`` (published after commit).
- Each accepted transition sends ``order_transitioned`` inside the same
  transaction; slip modules use it to close claims the order has left.
- Direct field edits never touch ``status`` / ``previous_status``.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from modules.orders.constants import (
    EDITABLE_ORDER_FIELDS,
    MONEY_FIELDS,
    PROTECTED_ORDER_FIELDS,
    OrderStatus,
)
from modules.orders.events import OrderCreated, OrderStatusChanged
from modules.orders.exceptions import (
    InvalidOrderField,
    InvalidOrderStatus,
    OrderNotFound,
    ProtectedOrderField,
)
from modules.orders.signals import order_transitioned
from modules.orders.statuses import get_status, requires_driver
from modules.orders.totals import OrderTotals, compute_totals
from modules.orders.transitions import is_driver_assigned, validate_transition

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")
# Money columns are Decimal(10, 2).
MAX_AMOUNT = Decimal("100000000")


class OrderService:
    """Application service for Order use-cases.

    Receives the repository via constructor injection (DIP).
    """

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Take in a new order in ``PENDING``.

        ``item_price`` defaults to ``cod - delivery_fee - additional_cost``
        when the caller does not supply it.
        """
        item_price = dto.item_price
        if item_price is None:
            item_price = dto.cod - dto.delivery_fee - dto.additional_cost

        order = self._order_repo.create(
            {
                "recipient": dto.recipient,
                "phone": dto.phone,
                "address": dto.address,
                "city": dto.city,
                "region": dto.region,
                "merchant": dto.merchant,
                "driver": dto.driver,
                "source": dto.source,
                "reference_number": dto.reference_number,
                "cod": dto.cod,
                "item_price": item_price,
                "delivery_fee": dto.delivery_fee,
                "additional_cost": dto.additional_cost,
                "driver_fee": dto.driver_fee,
                "driver_additional_fare": dto.driver_additional_fare,
                "date": dto.date or timezone.localdate(),
                "notes": dto.notes,
                "status": OrderStatus.PENDING,
            }
        )

        order.add_domain_event(
            OrderCreated(aggregate_id=order.id, order_number=order.order_number)
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order, old_status=None, new_status=order.status, notes="Order created"
        )

        logger.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            merchant=order.merchant,
        )
        return order

    @transaction.atomic
    def update_order_status(
        self,
        order_id: UUID | str,
        new_status: str,
        driver_name: Optional[str] = None,
        *,
        actor_role: Optional[str] = None,
        notes: str = "",
    ) -> Order:
        """Transition an order to *new_status*.

        The row is locked before validation.  The validator sees the
        driver supplied with the request, not the one already on the
        order; a supplied driver replaces the current one, an absent one
        keeps it.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: the Transition Validator rejected the change.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=str(order_id))

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=new_status,
        )

        result = validate_transition(order.status, new_status, driver_name, actor_role)
        if not result:
            log.warning("order.invalid_transition", reason=result.code)
            raise InvalidOrderStatus(
                result.error, code=result.code, order_id=str(order.id)
            )

        self._apply(order, new_status, driver=driver_name, notes=notes)
        log.info("order.status_updated", driver=order.driver)
        return order

    @transaction.atomic
    def bulk_update_status(
        self,
        order_ids: Sequence[UUID | str],
        new_status: str,
        driver_name: Optional[str] = None,
        *,
        actor_role: Optional[str] = None,
        notes: str = "",
    ) -> List[Order]:
        """Apply one transition to many orders, all or nothing.

        Every order is locked and validated before the first write.

        Raises:
            OrderNotFound: any id is unknown.
            InvalidOrderStatus: any transition is rejected; names the order.
        """
        requested = [str(i) for i in order_ids]
        locked = self._order_repo.lock_many(sorted(set(requested)))

        orders: List[Order] = []
        for order_id in requested:
            order = locked.get(order_id)
            if order is None:
                raise OrderNotFound(f"Order {order_id} not found.", order_id=order_id)
            result = validate_transition(
                order.status, new_status, driver_name, actor_role
            )
            if not result:
                logger.warning(
                    "order.bulk_invalid_transition",
                    order_id=order_id,
                    current_status=order.status,
                    new_status=new_status,
                    reason=result.code,
                )
                raise InvalidOrderStatus(
                    f"Order #{order.order_number}: {result.error}",
                    code=result.code,
                    order_id=order_id,
                )
            orders.append(order)

        for order in orders:
            self._apply(order, new_status, driver=driver_name, notes=notes)

        logger.info(
            "order.bulk_status_updated",
            new_status=new_status,
            order_count=len(orders),
        )
        return orders

    def apply_system_transition(
        self,
        order: Order,
        new_status: str,
        *,
        clear_driver: bool = False,
        notes: str = "",
    ) -> Order:
        """Transition an order the caller already holds locked.

        Used by batch workflows (slip creation) that validate their own
        preconditions.  The driver requirement and setter roles are not
        checked; the target must still be a known status different from
        the current one.
        """
        if get_status(new_status) is None:
            raise InvalidOrderStatus(
                "unknown or inactive status",
                code="unknown_status",
                order_id=str(order.id),
            )
        if order.status == new_status:
            raise InvalidOrderStatus(
                "status unchanged", code="status_unchanged", order_id=str(order.id)
            )
        if clear_driver:
            order.driver = None
        self._apply(order, new_status, driver=None, notes=notes)
        logger.info(
            "order.system_transition",
            order_id=str(order.id),
            previous_status=order.previous_status,
            new_status=new_status,
        )
        return order

    @transaction.atomic
    def update_order_field(self, order_id: UUID | str, field: str, value: Any) -> Order:
        """Edit a single order field directly, bypassing the validator.

        Raises:
            OrderNotFound: order does not exist.
            ProtectedOrderField: the field is only written by transitions.
            InvalidOrderField: unknown field or unacceptable value.
        """
        if field in PROTECTED_ORDER_FIELDS:
            raise ProtectedOrderField(
                f"Field '{field}' cannot be edited directly.", field=field
            )
        if field not in EDITABLE_ORDER_FIELDS:
            raise InvalidOrderField(f"Unknown order field '{field}'.", field=field)

        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=str(order_id))

        cleaned = self._clean_field_value(order, field, value)
        setattr(order, field, cleaned)
        self._order_repo.save(order)

        logger.info("order.field_updated", order_id=str(order.id), field=field)
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID | str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=str(order_id))
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Return a list of orders, optionally filtered."""
        return self._order_repo.list(filters)

    def compute_totals(self, filters: Optional[Dict[str, Any]] = None) -> OrderTotals:
        return compute_totals(self._order_repo.list(filters))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply(
        self, order: Order, new_status: str, *, driver: Optional[str], notes: str
    ) -> None:
        old_status = order.status
        order.previous_status = old_status
        order.status = new_status
        if is_driver_assigned(driver):
            order.driver = str(driver).strip()

        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=old_status,
                new_status=new_status,
                driver=order.driver,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order, old_status=old_status, new_status=new_status, notes=notes
        )
        order_transitioned.send(
            sender=type(order),
            order=order,
            old_status=old_status,
            new_status=new_status,
        )

    @staticmethod
    def _clean_field_value(order: Order, field: str, value: Any) -> Any:
        if field in MONEY_FIELDS:
            try:
                amount = Decimal(str(value)).quantize(CENT)
            except (InvalidOperation, ValueError, TypeError) as exc:
                raise InvalidOrderField(
                    f"Field '{field}' must be a decimal amount.", field=field
                ) from exc
            if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
                raise InvalidOrderField(
                    f"Field '{field}' must be a decimal amount.", field=field
                )
            if field == "cod" and amount < 0:
                raise InvalidOrderField("COD cannot be negative.", field=field)
            return amount

        if field == "driver":
            if not is_driver_assigned(value):
                if requires_driver(order.status):
                    raise InvalidOrderField(
                        "Driver cannot be cleared while the status requires one.",
                        field=field,
                    )
                return None
            return str(value).strip()

        if field == "date":
            if isinstance(value, dt.date):
                return value
            try:
                parsed = parse_date(str(value)) if value else None
            except ValueError:
                parsed = None
            if parsed is None:
                raise InvalidOrderField(
                    "Field 'date' must be an ISO date (YYYY-MM-DD).", field=field
                )
            return parsed

        text = "" if value is None else str(value)
        if field == "recipient" and not text.strip():
            raise InvalidOrderField("Recipient is required.", field=field)
        return text
