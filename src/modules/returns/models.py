"""Return slip models.

A return slip records the physical hand-off of returned parcels:
``DriverSlip`` from a driver to the branch, ``MerchantSlip`` from the
branch to a merchant.  References are ``DS-YYYYMMDD-XXXXXX`` and
``RS-YYYYMMDD-XXXXXX``.

Entries snapshot the printable order fields at creation time; later
order edits never change a historical slip.  An entry stays open while
the order sits in the status the slip moved it to (``BRANCH_RETURNED``
for driver slips, ``MERCHANT_RETURNED`` for merchant slips) and is
released the moment the Order Store moves it on, so a parcel that goes
out and comes back again can be put on a new slip.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import ClaimEntry, Slip
from modules.orders.statuses import display_name
from modules.orders.totals import slip_total
from modules.returns.constants import (
    DRIVER_SLIP_PREFIX,
    MERCHANT_SLIP_PREFIX,
    SlipStatus,
)


class ReturnSlip(Slip):
    class Meta(Slip.Meta):
        abstract = True

    @property
    def total_item_price(self) -> Decimal:
        return slip_total(self.entries.all())


class DriverSlip(ReturnSlip):
    """Parcels a driver handed back to the branch."""

    reference_prefix = DRIVER_SLIP_PREFIX

    driver_name: models.CharField = models.CharField(max_length=255)

    class Meta(ReturnSlip.Meta):
        db_table = "driver_return_slips"
        indexes = [
            models.Index(fields=["driver_name", "-date"], name="drs_driver_date_idx"),
        ]

    @property
    def party_name(self) -> str:
        return self.driver_name


class MerchantSlip(ReturnSlip):
    """Parcels the branch hands back to a merchant.

    ``status`` records the physical handover for the whole slip; the
    orders themselves stay in ``MERCHANT_RETURNED``.
    """

    reference_prefix = MERCHANT_SLIP_PREFIX

    merchant_name: models.CharField = models.CharField(max_length=255)
    status: models.CharField = models.CharField(
        max_length=32,
        choices=SlipStatus.choices,
        default=SlipStatus.READY_FOR_PICKUP,
    )
    delivered_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    class Meta(ReturnSlip.Meta):
        db_table = "merchant_return_slips"
        indexes = [
            models.Index(
                fields=["merchant_name", "-date"], name="mrs_merchant_date_idx"
            ),
            models.Index(fields=["status"], name="mrs_status_idx"),
        ]

    @property
    def party_name(self) -> str:
        return self.merchant_name

    @property
    def is_delivered(self) -> bool:
        return self.status == SlipStatus.DELIVERED_TO_MERCHANT


class SlipEntry(ClaimEntry):
    """One order on a return slip, with the fields printed for it.

    ``previous_status`` is the status the parcel came back with, shown
    on the printed slip as the reason for the return.
    """

    recipient: models.CharField = models.CharField(max_length=255)
    phone: models.CharField = models.CharField(max_length=32, blank=True, default="")
    city: models.CharField = models.CharField(max_length=100, blank=True, default="")
    address: models.CharField = models.CharField(max_length=500, blank=True, default="")
    previous_status: models.CharField = models.CharField(max_length=32)
    item_price: models.DecimalField = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )

    class Meta(ClaimEntry.Meta):
        abstract = True

    @property
    def return_reason(self) -> str:
        return display_name(self.previous_status)


class DriverSlipEntry(SlipEntry):
    slip: models.ForeignKey = models.ForeignKey(
        "returns.DriverSlip",
        on_delete=models.CASCADE,
        related_name="entries",
    )

    class Meta(SlipEntry.Meta):
        db_table = "driver_return_slip_entries"
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=models.Q(released_at__isnull=True),
                name="drs_entry_one_open_per_order",
            ),
            models.UniqueConstraint(
                fields=["slip", "position"], name="drs_entry_slip_position_uniq"
            ),
            models.UniqueConstraint(
                fields=["slip", "order"], name="drs_entry_slip_order_uniq"
            ),
        ]


class MerchantSlipEntry(SlipEntry):
    slip: models.ForeignKey = models.ForeignKey(
        "returns.MerchantSlip",
        on_delete=models.CASCADE,
        related_name="entries",
    )

    class Meta(SlipEntry.Meta):
        db_table = "merchant_return_slip_entries"
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=models.Q(released_at__isnull=True),
                name="mrs_entry_one_open_per_order",
            ),
            models.UniqueConstraint(
                fields=["slip", "position"], name="mrs_entry_slip_position_uniq"
            ),
            models.UniqueConstraint(
                fields=["slip", "order"], name="mrs_entry_slip_order_uniq"
            ),
        ]
