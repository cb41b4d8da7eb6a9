"""Returns domain constants."""

from django.db import models


class SlipStatus(models.TextChoices):
    READY_FOR_PICKUP = "ready_for_pickup", "جاهز للاستلام"
    DELIVERED_TO_MERCHANT = "delivered_to_merchant", "تم التسليم للتاجر"


DRIVER_SLIP_PREFIX = "DS"
MERCHANT_SLIP_PREFIX = "RS"
