"""Order and OrderStatusHistory models.

Rules carried by the schema:
- ``order_number`` is a monotonic, human-facing integer (unique).
- ``cod`` is never negative (check constraint).
- Money columns are ``Decimal(10, 2)``.
- ``previous_status`` holds the status immediately before the current
  one; it is what slips print as the reason for a return.
- Every accepted transition appends an ``OrderStatusHistory`` row.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import OrderStatus
from modules.orders.statuses import display_name, requires_driver
from shared.domain.events import DomainEventMixin


def _money(**kwargs) -> models.DecimalField:
    return models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"), **kwargs
    )


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``driver`` and ``merchant`` are stored by name, as the dispatch
    screens and slips address parties by name.  ``driver`` is ``None``
    while unassigned.
    """

    order_number: models.PositiveIntegerField = models.PositiveIntegerField(
        unique=True, editable=False
    )
    source: models.CharField = models.CharField(max_length=100, blank=True, default="")
    reference_number: models.CharField = models.CharField(
        max_length=100, blank=True, default=""
    )
    recipient: models.CharField = models.CharField(max_length=255)
    phone: models.CharField = models.CharField(max_length=32, blank=True, default="")
    address: models.CharField = models.CharField(max_length=500, blank=True, default="")
    city: models.CharField = models.CharField(max_length=100, blank=True, default="")
    region: models.CharField = models.CharField(max_length=100, blank=True, default="")
    status: models.CharField = models.CharField(
        max_length=32,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    previous_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=32,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    driver: models.CharField = models.CharField(  # noqa: DJ01
        max_length=255, null=True, blank=True
    )
    merchant: models.CharField = models.CharField(max_length=255, blank=True, default="")
    cod: models.DecimalField = _money()
    item_price: models.DecimalField = _money()
    delivery_fee: models.DecimalField = _money()
    additional_cost: models.DecimalField = _money()
    driver_fee: models.DecimalField = _money()
    driver_additional_fare: models.DecimalField = _money()
    date: models.DateField = models.DateField(default=timezone.localdate)
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-order_number"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["driver", "status"], name="orders_driver_status_idx"),
            models.Index(
                fields=["merchant", "status"], name="orders_merchant_status_idx"
            ),
            models.Index(fields=["-date"], name="orders_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(cod__gte=0),
                name="orders_cod_non_negative",
            ),
        ]

    @property
    def status_display_name(self) -> str:
        return display_name(self.status)

    @property
    def previous_status_display_name(self) -> str:
        return display_name(self.previous_status)

    @property
    def needs_driver(self) -> bool:
        """``True`` while the current status requires an assigned driver."""
        return requires_driver(self.status)

    def __str__(self) -> str:
        return f"#{self.order_number} ({self.status})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``old_status`` is ``None`` for the intake record written when the
    order is created.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=32,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=32,
        choices=OrderStatus.choices,
    )
    driver: models.CharField = models.CharField(  # noqa: DJ01
        max_length=255, null=True, blank=True
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["order", "-created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
