"""Payment slip models.

A payment slip settles the cash side of delivered orders:
``DriverPaymentSlip`` records a driver handing in the cash collected for
a batch of delivered orders, ``MerchantPaymentSlip`` records the branch
paying a merchant for orders whose cash is in.  References are
``DP-YYYYMMDD-XXXXXX`` and ``MP-YYYYMMDD-XXXXXX``.

Entries snapshot the money columns at creation time, so the totals of a
historical slip never move when an order is edited later.  Both kinds
hold their orders in ``MONEY_RECEIVED``.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import ClaimEntry, Slip
from modules.orders.totals import OrderTotals, compute_totals
from modules.settlements.constants import (
    DRIVER_PAYMENT_PREFIX,
    MERCHANT_PAYMENT_PREFIX,
    PaymentStatus,
)


class PaymentSlip(Slip):
    class Meta(Slip.Meta):
        abstract = True

    @property
    def totals(self) -> OrderTotals:
        return compute_totals(self.entries.all())

    @property
    def amount_due(self) -> Decimal:
        raise NotImplementedError


class DriverPaymentSlip(PaymentSlip):
    """Cash a driver hands in for delivered orders."""

    reference_prefix = DRIVER_PAYMENT_PREFIX

    driver_name = models.CharField(max_length=255)

    class Meta(PaymentSlip.Meta):
        db_table = "driver_payment_slips"
        indexes = [
            models.Index(fields=["driver_name", "-date"], name="dps_driver_date_idx"),
        ]

    @property
    def party_name(self) -> str:
        return self.driver_name

    @property
    def amount_due(self) -> Decimal:
        """Collected cash less the driver's own fees."""
        totals = self.totals
        return totals.cod - totals.driver_fee


class MerchantPaymentSlip(PaymentSlip):
    """Cash the branch pays out to a merchant."""

    reference_prefix = MERCHANT_PAYMENT_PREFIX

    merchant_name = models.CharField(max_length=255)
    status = models.CharField(
        max_length=32,
        choices=PaymentStatus.choices,
        default=PaymentStatus.READY_FOR_PAYMENT,
    )
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta(PaymentSlip.Meta):
        db_table = "merchant_payment_slips"
        indexes = [
            models.Index(
                fields=["merchant_name", "-date"], name="mps_merchant_date_idx"
            ),
            models.Index(fields=["status"], name="mps_status_idx"),
        ]

    @property
    def party_name(self) -> str:
        return self.merchant_name

    @property
    def amount_due(self) -> Decimal:
        """The merchants' share: the item prices."""
        return self.totals.item_price

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID


def _money() -> models.DecimalField:
    return models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))


class PaymentEntry(ClaimEntry):
    """One order on a payment slip with its money columns."""

    recipient = models.CharField(max_length=255)
    order_status = models.CharField(max_length=32)
    cod = _money()
    item_price = _money()
    delivery_fee = _money()
    additional_cost = _money()
    driver_fee = _money()
    driver_additional_fare = _money()

    class Meta(ClaimEntry.Meta):
        abstract = True


class DriverPaymentEntry(PaymentEntry):
    slip = models.ForeignKey(
        "settlements.DriverPaymentSlip",
        on_delete=models.CASCADE,
        related_name="entries",
    )

    class Meta(PaymentEntry.Meta):
        db_table = "driver_payment_slip_entries"
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=models.Q(released_at__isnull=True),
                name="dps_entry_one_open_per_order",
            ),
            models.UniqueConstraint(
                fields=["slip", "position"], name="dps_entry_slip_position_uniq"
            ),
        ]


class MerchantPaymentEntry(PaymentEntry):
    slip = models.ForeignKey(
        "settlements.MerchantPaymentSlip",
        on_delete=models.CASCADE,
        related_name="entries",
    )

    class Meta(PaymentEntry.Meta):
        db_table = "merchant_payment_slip_entries"
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=models.Q(released_at__isnull=True),
                name="mps_entry_one_open_per_order",
            ),
            models.UniqueConstraint(
                fields=["slip", "position"], name="mps_entry_slip_position_uniq"
            ),
        ]
