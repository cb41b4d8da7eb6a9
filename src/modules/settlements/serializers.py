"""Settlements DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.core.constants import MAX_SLIP_ORDERS
from modules.orders.serializers import OrderTotalsSerializer
from modules.settlements.models import (
    DriverPaymentEntry,
    DriverPaymentSlip,
    MerchantPaymentEntry,
    MerchantPaymentSlip,
)

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class _PaymentRequestSerializer(serializers.Serializer):
    order_ids = serializers.ListField(
        child=serializers.UUIDField(), allow_empty=False, max_length=MAX_SLIP_ORDERS
    )


class CreateDriverPaymentSlipSerializer(_PaymentRequestSerializer):
    driver_name = serializers.CharField(max_length=255)


class CreateMerchantPaymentSlipSerializer(_PaymentRequestSerializer):
    merchant_name = serializers.CharField(max_length=255)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------

_ENTRY_FIELDS = [
    "position",
    "order_id",
    "order_number",
    "recipient",
    "order_status",
    "cod",
    "item_price",
    "delivery_fee",
    "additional_cost",
    "driver_fee",
    "driver_additional_fare",
    "released_at",
]


class DriverPaymentEntrySerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = DriverPaymentEntry
        fields = _ENTRY_FIELDS
        read_only_fields = fields


class MerchantPaymentEntrySerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = MerchantPaymentEntry
        fields = _ENTRY_FIELDS
        read_only_fields = fields


class _PaymentSlipSerializer(serializers.ModelSerializer):
    order_ids = serializers.ListField(child=serializers.CharField(), read_only=True)
    totals = serializers.SerializerMethodField()
    amount_due = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )

    def get_totals(self, slip) -> dict:
        return OrderTotalsSerializer(slip.totals.as_dict(rounded=True)).data


class DriverPaymentSlipSerializer(_PaymentSlipSerializer):
    entries = DriverPaymentEntrySerializer(
        source="ordered_entries", many=True, read_only=True
    )

    class Meta:
        model = DriverPaymentSlip
        fields = [
            "id",
            "reference",
            "driver_name",
            "date",
            "item_count",
            "order_ids",
            "totals",
            "amount_due",
            "entries",
            "created_at",
        ]
        read_only_fields = fields


class MerchantPaymentSlipSerializer(_PaymentSlipSerializer):
    entries = MerchantPaymentEntrySerializer(
        source="ordered_entries", many=True, read_only=True
    )

    class Meta:
        model = MerchantPaymentSlip
        fields = [
            "id",
            "reference",
            "merchant_name",
            "date",
            "item_count",
            "status",
            "paid_at",
            "order_ids",
            "totals",
            "amount_due",
            "entries",
            "created_at",
        ]
        read_only_fields = fields
