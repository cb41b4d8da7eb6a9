from django.apps import AppConfig
from django.conf import settings


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.core"
    label = "core"

    def ready(self) -> None:
        if not getattr(settings, "REALTIME_RELAY_ENABLED", False):
            return

        from modules.core.realtime_relay import connect_relay
        from shared.infrastructure.realtime import realtime_bus

        connect_relay(realtime_bus)
