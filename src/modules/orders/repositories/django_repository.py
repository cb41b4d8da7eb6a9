"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Concurrency control uses ``select_for_update()``; batch locks are taken
in ascending primary-key order so two overlapping batches cannot
deadlock.  Domain events collected on the aggregate are handed to the
event bus only after the surrounding transaction commits.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Max

from modules.orders.constants import ORDER_NUMBER_MAX_RETRIES
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository
from shared.infrastructure.bus import flush_domain_events

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert an order with ``order_number = max + 1``.

        Two concurrent intakes can read the same maximum; the loser hits
        the unique index, rolls back to its savepoint and retries.
        """
        for attempt in range(1, ORDER_NUMBER_MAX_RETRIES + 1):
            order = Order(order_number=self._next_order_number(), **data)
            try:
                with transaction.atomic():
                    order.save(force_insert=True)
            except IntegrityError:
                logger.warning(
                    "order.number_collision",
                    order_number=order.order_number,
                    attempt=attempt,
                )
                continue
            logger.info(
                "order.inserted",
                order_id=str(order.id),
                order_number=order.order_number,
            )
            return order
        raise RuntimeError(
            f"Failed to allocate a unique order_number after "
            f"{ORDER_NUMBER_MAX_RETRIES} attempts"
        )

    @staticmethod
    def _next_order_number() -> int:
        current = Order.objects.aggregate(top=Max("order_number"))["top"]
        return (current or 0) + 1

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Return ``None`` for non-existent or malformed IDs."""
        try:
            return Order.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = Order.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_by_driver(
        self, driver_name: str, statuses: Optional[Iterable[str]] = None
    ) -> List[Order]:
        queryset = Order.objects.filter(driver=driver_name)
        if statuses is not None:
            queryset = queryset.filter(status__in=list(statuses))
        return list(queryset.order_by("order_number"))

    def list_by_merchant(
        self, merchant_name: str, statuses: Optional[Iterable[str]] = None
    ) -> List[Order]:
        queryset = Order.objects.filter(merchant=merchant_name)
        if statuses is not None:
            queryset = queryset.filter(status__in=list(statuses))
        return list(queryset.order_by("order_number"))

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must run inside a transaction.  Returns ``None`` for non-existent
        or invalid IDs.
        """
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def lock_many(self, ids: Sequence[str]) -> Dict[str, Order]:
        valid_ids = []
        for raw in ids:
            try:
                valid_ids.append(Order._meta.pk.to_python(raw))
            except ValidationError:
                continue
        if not valid_ids:
            return {}
        orders = Order.objects.select_for_update().filter(id__in=valid_ids).order_by("id")
        return {str(order.id): order for order in orders}

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and queue its domain events for after commit."""
        entity.save()
        event_count = flush_domain_events(entity)
        logger.debug("order.saved", order_id=str(entity.id), event_count=event_count)
        return entity

    # ------------------------------------------------------------------
    # Audit trail
    # ------------------------------------------------------------------

    def add_history(
        self,
        order: Order,
        old_status: Optional[str],
        new_status: str,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=new_status,
            driver=order.driver,
            notes=notes,
        )
        logger.debug(
            "order.history_added",
            order_id=str(order.id),
            old_status=old_status,
            new_status=new_status,
        )
        return history
