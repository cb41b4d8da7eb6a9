from django.apps import AppConfig


class ReturnsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.returns"
    label = "returns"

    def ready(self) -> None:
        from modules.returns import receivers  # noqa: F401
        from modules.returns.events import (
            DriverSlipCreated,
            MerchantSlipCreated,
            MerchantSlipDelivered,
        )
        from modules.returns.handlers import (
            driver_slip_created_handler,
            merchant_slip_created_handler,
            merchant_slip_delivered_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(DriverSlipCreated, driver_slip_created_handler)
        event_bus.subscribe(MerchantSlipCreated, merchant_slip_created_handler)
        event_bus.subscribe(MerchantSlipDelivered, merchant_slip_delivered_handler)
