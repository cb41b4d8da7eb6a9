from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.returns.dtos import CreateDriverSlipDTO
from modules.returns.repositories.django_repository import (
    DriverSlipDjangoRepository,
    MerchantSlipDjangoRepository,
)
from modules.returns.services import ReturnsService

SEED_NOTE = "Seed order"

DRIVERS = ["أحمد", "محمد", "خالد", "يوسف"]
MERCHANTS = ["متجر الأمل", "بوتيك ليلى", "إلكترونيات النور"]
CITIES = [
    ("عمان", "الجبيهة"),
    ("عمان", "خلدا"),
    ("الزرقاء", "الزرقاء الجديدة"),
    ("إربد", "الحصن"),
]
RECIPIENTS = ["سارة", "علي", "مريم", "حسن", "نور", "رامي", "هبة", "سامر"]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        if Order.objects.filter(notes__startswith=SEED_NOTE).exists():
            self.stdout.write(self.style.WARNING("Orders already seeded; skipping."))
            return

        order_service = OrderService(OrderDjangoRepository())
        orders = self._seed_orders(order_service)
        slips = self._seed_returns(order_service, orders)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"orders={len(orders)}, "
                f"driver_slips={slips}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="dispatcher").exists():
            User.objects.create_user("dispatcher", password="dispatcher123", is_staff=True)
            created += 1
        return created

    def _seed_orders(self, service: OrderService) -> list[Order]:
        self.stdout.write("Creating orders...")
        orders: list[Order] = []
        for i in range(40):
            city, region = random.choice(CITIES)
            cod = Decimal(random.randint(8, 60))
            order = service.create_order(
                CreateOrderDTO(
                    recipient=random.choice(RECIPIENTS),
                    phone=f"079{random.randint(1000000, 9999999)}",
                    address=f"{region} - شارع {random.randint(1, 40)}",
                    city=city,
                    region=region,
                    merchant=random.choice(MERCHANTS),
                    cod=cod,
                    notes=f"{SEED_NOTE} {i + 1}",
                )
            )
            orders.append(order)
        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))

        self.stdout.write("Dispatching orders...")
        outcomes = [
            OrderStatus.DELIVERED,
            OrderStatus.POSTPONED,
            OrderStatus.RETURNED,
            OrderStatus.REFUSED_UNPAID,
            OrderStatus.NO_ANSWER,
        ]
        for order in orders[: len(orders) * 3 // 4]:
            driver = random.choice(DRIVERS)
            service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY, driver)
            service.update_order_status(order.id, random.choice(outcomes))
        self.stdout.write(self.style.SUCCESS("Dispatching orders... Done!"))
        return [service.get_order(order.id) for order in orders]

    @transaction.atomic
    def _seed_returns(self, order_service: OrderService, orders: list[Order]) -> int:
        self.stdout.write("Creating driver slips...")
        returns = ReturnsService(
            order_repository=OrderDjangoRepository(),
            driver_slip_repository=DriverSlipDjangoRepository(),
            merchant_slip_repository=MerchantSlipDjangoRepository(),
            order_service=order_service,
        )
        created = 0
        for driver in DRIVERS[:2]:
            candidates = returns.list_driver_return_candidates(driver)
            if not candidates:
                continue
            returns.create_driver_slip(
                CreateDriverSlipDTO(
                    driver_name=driver, order_ids=[o.id for o in candidates]
                )
            )
            created += 1
        self.stdout.write(self.style.SUCCESS("Creating driver slips... Done!"))
        return created
