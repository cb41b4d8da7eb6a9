"""Settlements domain constants."""

from django.db import models


class PaymentStatus(models.TextChoices):
    READY_FOR_PAYMENT = "ready_for_payment", "جاهز للتسليم"
    PAID = "paid", "مدفوع"


DRIVER_PAYMENT_PREFIX = "DP"
MERCHANT_PAYMENT_PREFIX = "MP"
