"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.orders.constants import (
    DEFAULT_DELIVERY_FEE,
    DEFAULT_DRIVER_FEE,
    SetterRole,
)
from modules.orders.models import Order, OrderStatusHistory


def _money_field(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(max_digits=10, decimal_places=2, **kwargs)


# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order intake payload."""

    recipient = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32, required=False, default="", allow_blank=True)
    address = serializers.CharField(
        max_length=500, required=False, default="", allow_blank=True
    )
    city = serializers.CharField(max_length=100, required=False, default="", allow_blank=True)
    region = serializers.CharField(
        max_length=100, required=False, default="", allow_blank=True
    )
    merchant = serializers.CharField(
        max_length=255, required=False, default="", allow_blank=True
    )
    driver = serializers.CharField(
        max_length=255, required=False, allow_null=True, allow_blank=True, default=None
    )
    source = serializers.CharField(
        max_length=100, required=False, default="", allow_blank=True
    )
    reference_number = serializers.CharField(
        max_length=100, required=False, default="", allow_blank=True
    )
    cod = _money_field(min_value=Decimal("0"), required=False, default=Decimal("0.00"))
    item_price = _money_field(required=False, allow_null=True, default=None)
    delivery_fee = _money_field(required=False, default=DEFAULT_DELIVERY_FEE)
    additional_cost = _money_field(required=False, default=Decimal("0.00"))
    driver_fee = _money_field(required=False, default=DEFAULT_DRIVER_FEE)
    driver_additional_fare = _money_field(required=False, default=Decimal("0.00"))
    date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class UpdateOrderStatusSerializer(serializers.Serializer):
    """Validates a status transition request.

    ``status`` is not restricted to known codes here: the Transition
    Validator reports unknown codes with its own reason.
    """

    status = serializers.CharField(max_length=32)
    driver_name = serializers.CharField(
        max_length=255, required=False, allow_null=True, allow_blank=True, default=None
    )
    actor_role = serializers.ChoiceField(
        choices=SetterRole.choices, required=False, allow_null=True, default=None
    )
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class BulkStatusUpdateSerializer(UpdateOrderStatusSerializer):
    order_ids = serializers.ListField(
        child=serializers.UUIDField(), allow_empty=False, max_length=500
    )


class UpdateOrderFieldSerializer(serializers.Serializer):
    field = serializers.CharField(max_length=64)
    value = serializers.JSONField(allow_null=True)


class ValidateTransitionSerializer(serializers.Serializer):
    current_status = serializers.CharField(
        max_length=32, required=False, allow_null=True, default=None
    )
    target_status = serializers.CharField(max_length=32)
    driver_name = serializers.CharField(
        max_length=255, required=False, allow_null=True, allow_blank=True, default=None
    )
    actor_role = serializers.ChoiceField(
        choices=SetterRole.choices, required=False, allow_null=True, default=None
    )


class DriverPresenceSerializer(serializers.Serializer):
    is_online = serializers.BooleanField()


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "driver",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


_ORDER_FIELDS = [
    "id",
    "order_number",
    "source",
    "reference_number",
    "recipient",
    "phone",
    "address",
    "city",
    "region",
    "status",
    "status_display_name",
    "previous_status",
    "previous_status_display_name",
    "driver",
    "merchant",
    "cod",
    "item_price",
    "delivery_fee",
    "additional_cost",
    "driver_fee",
    "driver_additional_fare",
    "date",
    "notes",
    "created_at",
    "updated_at",
]


class OrderListSerializer(serializers.ModelSerializer):
    """Flat order representation (no nested history)."""

    status_display_name = serializers.CharField(read_only=True)
    previous_status_display_name = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = _ORDER_FIELDS
        read_only_fields = fields


class OrderSerializer(OrderListSerializer):
    """Order detail including its status history."""

    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = _ORDER_FIELDS + ["status_history"]
        read_only_fields = fields


class OrderTotalsSerializer(serializers.Serializer):
    order_count = serializers.IntegerField()
    item_price = _money_field()
    delivery_fee = _money_field()
    cod = _money_field()
    driver_fee = _money_field()
    additional_cost = _money_field()
    company_due = _money_field()


class StatusDefinitionSerializer(serializers.Serializer):
    code = serializers.CharField()
    display_name = serializers.CharField()
    icon = serializers.CharField()
    color = serializers.CharField()
    is_active = serializers.BooleanField()
    requires_driver_on_entry = serializers.BooleanField()
    allowed_setter_roles = serializers.SerializerMethodField()
    creates_return_task = serializers.BooleanField()
    is_final = serializers.BooleanField()

    def get_allowed_setter_roles(self, obj) -> list[str]:
        return sorted(obj.allowed_setter_roles)
