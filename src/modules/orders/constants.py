"""Order domain constants.

Status codes form a closed enumeration keyed by a stable ``code``; the
Arabic label is display text only and never used for comparisons.
Per-status metadata lives in ``modules.orders.statuses``.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "بالانتظار"
    AWAITING_DRIVER = "AWAITING_DRIVER", "بانتظار السائق"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY", "جاري التوصيل"
    DELIVERED = "DELIVERED", "تم التوصيل"
    POSTPONED = "POSTPONED", "مؤجل"
    RETURNED = "RETURNED", "مرتجع"
    CANCELLED = "CANCELLED", "ملغي"
    MONEY_RECEIVED = "MONEY_RECEIVED", "تم استلام المال في الفرع"
    MERCHANT_SETTLED = "MERCHANT_SETTLED", "تم محاسبة التاجر"
    COMPLETED = "COMPLETED", "مكتمل"
    EXCHANGE = "EXCHANGE", "تبديل"
    REFUSED_PAID = "REFUSED_PAID", "رفض ودفع أجور"
    REFUSED_UNPAID = "REFUSED_UNPAID", "رفض ولم يدفع أجور"
    BRANCH_RETURNED = "BRANCH_RETURNED", "مرجع للفرع"
    MERCHANT_RETURNED = "MERCHANT_RETURNED", "مرجع للتاجر"
    ARCHIVED = "ARCHIVED", "مؤرشف"
    NO_ANSWER = "NO_ANSWER", "لا رد"
    ARRIVAL_NO_ANSWER = "ARRIVAL_NO_ANSWER", "وصول وعدم رد"


class SetterRole(models.TextChoices):
    ADMIN = "admin", "Admin"
    SUPERVISOR = "supervisor", "Supervisor"
    DRIVER = "driver", "Driver"
    MERCHANT = "merchant", "Merchant"


# Placeholder the dispatch screens store when no driver is assigned.
UNASSIGNED_DRIVER = "غير معين"

# Fields ``update_order_field`` must never write.
PROTECTED_ORDER_FIELDS = frozenset(
    {"id", "order_number", "status", "previous_status", "created_at", "updated_at"}
)

EDITABLE_ORDER_FIELDS = frozenset(
    {
        "source",
        "reference_number",
        "recipient",
        "phone",
        "address",
        "city",
        "region",
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
    }
)

MONEY_FIELDS = frozenset(
    {
        "cod",
        "item_price",
        "delivery_fee",
        "additional_cost",
        "driver_fee",
        "driver_additional_fare",
    }
)

DEFAULT_DELIVERY_FEE = Decimal("1.50")
DEFAULT_DRIVER_FEE = Decimal("1.00")

ORDER_NUMBER_MAX_RETRIES = 5
