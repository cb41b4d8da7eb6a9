"""Returns DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.core.constants import MAX_SLIP_ORDERS
from modules.returns.models import (
    DriverSlip,
    DriverSlipEntry,
    MerchantSlip,
    MerchantSlipEntry,
)

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class _SlipRequestSerializer(serializers.Serializer):
    order_ids = serializers.ListField(
        child=serializers.UUIDField(), allow_empty=False, max_length=MAX_SLIP_ORDERS
    )


class CreateDriverSlipSerializer(_SlipRequestSerializer):
    driver_name = serializers.CharField(max_length=255)


class CreateMerchantSlipSerializer(_SlipRequestSerializer):
    merchant_name = serializers.CharField(max_length=255)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------

_ENTRY_FIELDS = [
    "position",
    "order_id",
    "order_number",
    "recipient",
    "phone",
    "city",
    "address",
    "previous_status",
    "return_reason",
    "item_price",
    "released_at",
]


class DriverSlipEntrySerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)
    return_reason = serializers.CharField(read_only=True)

    class Meta:
        model = DriverSlipEntry
        fields = _ENTRY_FIELDS
        read_only_fields = fields


class MerchantSlipEntrySerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)
    return_reason = serializers.CharField(read_only=True)

    class Meta:
        model = MerchantSlipEntry
        fields = _ENTRY_FIELDS
        read_only_fields = fields


class DriverSlipSerializer(serializers.ModelSerializer):
    order_ids = serializers.ListField(child=serializers.CharField(), read_only=True)
    total_item_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )
    entries = DriverSlipEntrySerializer(source="ordered_entries", many=True, read_only=True)

    class Meta:
        model = DriverSlip
        fields = [
            "id",
            "reference",
            "driver_name",
            "date",
            "item_count",
            "order_ids",
            "total_item_price",
            "entries",
            "created_at",
        ]
        read_only_fields = fields


class MerchantSlipSerializer(serializers.ModelSerializer):
    order_ids = serializers.ListField(child=serializers.CharField(), read_only=True)
    total_item_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )
    entries = MerchantSlipEntrySerializer(
        source="ordered_entries", many=True, read_only=True
    )

    class Meta:
        model = MerchantSlip
        fields = [
            "id",
            "reference",
            "merchant_name",
            "date",
            "item_count",
            "status",
            "delivered_at",
            "order_ids",
            "total_item_price",
            "entries",
            "created_at",
        ]
        read_only_fields = fields
