from django.apps import AppConfig


class SettlementsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.settlements"
    label = "settlements"

    def ready(self) -> None:
        from modules.settlements import receivers  # noqa: F401
        from modules.settlements.events import (
            DriverPaymentSlipCreated,
            MerchantPaymentSlipCreated,
            MerchantPaymentSlipPaid,
        )
        from modules.settlements.handlers import (
            driver_payment_created_handler,
            merchant_payment_created_handler,
            merchant_payment_paid_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(DriverPaymentSlipCreated, driver_payment_created_handler)
        event_bus.subscribe(MerchantPaymentSlipCreated, merchant_payment_created_handler)
        event_bus.subscribe(MerchantPaymentSlipPaid, merchant_payment_paid_handler)
